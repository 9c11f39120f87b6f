# ==============================================
# Namespaces & Packet Constants
# ==============================================

from types import MappingProxyType

NAMESPACES = MappingProxyType({
    # Standard
    "dc": "http://purl.org/dc/elements/1.1/",
    "iptc": "http://iptc.org/std/Iptc4xmpExt/2008-02-29/",
    "xmp": "http://ns.adobe.com/xap/1.0/",
    "photoshop": "http://ns.adobe.com/photoshop/1.0/",
    "xmpRights": "http://ns.adobe.com/xap/1.0/rights/",
    "exif": "http://ns.adobe.com/exif/1.0/",
    # ORBIT
    "lifestyle": "http://orbit.com/lifestyle/1.0/",
    "product": "http://orbit.com/product/1.0/",
    "orbit": "http://orbit.com/orbit/1.0/",
    "processing": "http://orbit.com/processing/1.0/",
})

# IPTC Extension elements use the Iptc4xmpExt prefix on the wire
IPTC_PREFIX = "Iptc4xmpExt"

SCHEMA_PREFIXES = ("lifestyle", "product", "orbit")
PROCESSING_PREFIX = "processing"

RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
PACKET_ID = "W5M0MpCehiHzreSzNTczkc9d"
PACKET_BEGIN = f'<?xpacket begin="\ufeff" id="{PACKET_ID}"?>'
PACKET_END = '<?xpacket end="w"?>'

LEDGER_ELEMENT = "Raw_JSON"

# APP1 identifier for XMP (null-terminated)
XMP_SIGNATURE = b"http://ns.adobe.com/xap/1.0/\x00"
