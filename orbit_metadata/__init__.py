# ==============================================
# ORBIT Metadata Codec
# ==============================================
#
# Embeds structured image-analysis results into JPEG files as an
# XMP packet, reads them back, and renders categorized reports.
#
# Topics:
#   1. normalization/  → tree model, flattening, field-name canonicalization
#   2. analysis/       → container classification, category tables, organizer
#   3. packet/         → packet serializer, ledger, APP1 segment, parser
#   4. storage/        → image storage collaborators (local, Supabase)
#   5. reporting/      → report field collection and rendering
#
# ==============================================

__version__ = "0.1.0"
