# ==============================================
# TOPIC 3: PACKET
# ==============================================
#
# This package builds the XMP packet for one image, embeds it in
# a JPEG as an APP1 segment, and reads it back.
#
# Write path:  tree → standard_fields + ledger → serializer → jpeg_segment.embed
# Read path:   jpeg_segment.extract → parser (ledger first, element scrape second)
#
# Modules:
# --------
# - namespaces.py       → Namespace URIs, envelope constants, APP1 signature
# - standard_fields.py  → Dublin Core / IPTC / XMP / Photoshop field synthesis
# - ledger.py           → Verbatim JSON copy of the tree (+ repair on decode)
# - serializer.py       → Multi-block packet text
# - jpeg_segment.py     → APP1 insert / scan
# - parser.py           → Packet text → tree + schema variant
# - inspection.py       → Packet validation and statistics
#
# ==============================================
