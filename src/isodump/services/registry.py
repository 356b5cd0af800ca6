from dataclasses import dataclass
from typing import Dict, Optional, Union


@dataclass(frozen=True)
class Container:
    """Box whose payload holds child boxes after extra_header_bytes of fixed fields"""

    extra_header_bytes: int = 0


@dataclass(frozen=True)
class Leaf:
    """Box with an opaque payload"""


LEAF = Leaf()

BoxKind = Union[Container, Leaf]

# Container boxes and the fixed fields preceding their first child
CONTAINER_BOXES: Dict[bytes, int] = {
    # ISO 14496-12 containers
    b"moov": 0,
    b"trak": 0,
    b"edts": 0,
    b"mdia": 0,
    b"minf": 0,
    b"dinf": 0,
    b"stbl": 0,
    b"stsd": 8,  # version/flags + entry_count
    b"mvex": 0,
    b"udta": 0,
    b"moof": 0,
    b"traf": 0,
    b"mfra": 0,
    b"ipro": 0,
    b"sinf": 0,
    b"schi": 0,
    b"fiin": 0,
    b"paen": 0,
    b"meco": 0,
    # Audio sample entries
    b"enca": 28,
    b"mp4a": 28,
    # Visual sample entries
    b"encv": 78,
    b"avc1": 78,
    b"avc2": 78,
    b"mp4v": 78,
}

_KINDS: Dict[bytes, Container] = {
    type_code: Container(extra) for type_code, extra in CONTAINER_BOXES.items()
}


def classify(type_code: bytes) -> BoxKind:
    """Return Container(extra_header_bytes) for known containers, LEAF otherwise"""
    return _KINDS.get(bytes(type_code), LEAF)


def lookup(type_code: bytes) -> Optional[int]:
    """Extra header bytes for a container type, None for leaves"""
    return CONTAINER_BOXES.get(bytes(type_code))
