# ==============================================
# TOPIC 2: ANALYSIS & CLASSIFICATION
# ==============================================
#
# This package decides how fields are presented: which RDF list
# container a multi-valued field is written with, and which report
# category a recovered field belongs to.
#
# Modules:
# --------
# - decision.py              → ContainerKind / ContainerDecision data classes
# - container_classifier.py  → rdf:Seq vs rdf:Bag rules
# - categories.py            → Immutable per-schema category tables
# - category_organizer.py    → Exclusive field → category assignment
#
# ==============================================
