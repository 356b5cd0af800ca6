import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Generator, Iterable, Iterator, List, Optional, Union

from ..config import MAX_DEPTH
from ..errors import BoxDecodeError
from .box_header import MIN_HEADER_SIZE, decode_header, type_name
from .registry import Container, classify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Region:
    """Slice of the input selected for dumping"""

    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length

    def read(self, data) -> bytes:
        return bytes(data[self.start : self.end])


@dataclass(frozen=True)
class BoxEvent:
    """One visited box, in pre-order"""

    offset: int
    depth: int
    type_code: bytes
    size: int
    header_length: int
    region: Optional[Region] = None

    @property
    def name(self) -> str:
        return type_name(self.type_code)


@dataclass(frozen=True)
class BoundaryViolation:
    """Box discarded because it claimed to extend past its parent"""

    offset: int
    depth: int
    type_code: bytes
    claimed_size: int
    boundary: int

    @property
    def name(self) -> str:
        return type_name(self.type_code)


@dataclass
class TraversalReport:
    """Result of a full traversal"""

    data_size: int
    end_offset: int = 0
    events: List[BoxEvent] = field(default_factory=list)
    violations: List[BoundaryViolation] = field(default_factory=list)
    stop_reason: Optional[BoxDecodeError] = None

    @property
    def complete(self) -> bool:
        # A fixed-field prefix may carry the offset past the last byte
        return self.stop_reason is None and self.end_offset >= self.data_size


class ScanExit(Enum):
    """How a container scan handed control back to its parent"""

    CLOSED = "closed"  # offset reached the container end
    DISCARDED = "discarded"  # a child overran the container, offset sits at its end
    STOPPED = "stopped"  # a header failed to decode


def _fold(offset: int, end: int) -> int:
    """Skip slack too small to hold another box header"""
    if offset < end and end - offset < MIN_HEADER_SIZE:
        return end
    return offset


def as_type_code(value: Union[str, bytes]) -> bytes:
    """Normalize a user supplied box type filter to its 4-byte code"""
    code = value.encode("latin-1") if isinstance(value, str) else bytes(value)
    if len(code) != 4:
        raise ValueError(f"Box type must be exactly 4 characters, got {value!r}")
    return code


class BoxWalker:
    """Pre-order traversal of the box tree of an ISOBMFF container"""

    def __init__(
        self,
        data,
        dump_types: Iterable[Union[str, bytes]] = (),
        max_depth: int = MAX_DEPTH,
        debug: bool = False,
    ):
        """
        Args:
            data: Whole container as a read-only buffer
            dump_types: Box types whose payload regions are attached to their events
            max_depth: Containers at this depth are skipped as leaves
            debug: Enable per-box debug logging
        """
        self.data = data
        self.data_size = len(data)
        self.dump_types = tuple(as_type_code(t) for t in dump_types)
        self.max_depth = max_depth
        self.debug = debug

        self.offset = 0
        self.violations: List[BoundaryViolation] = []
        self.stop_reason: Optional[BoxDecodeError] = None

    def walk(self) -> Iterator[BoxEvent]:
        """Yield one event per box; self.offset holds the stop offset afterwards"""
        self.offset = 0
        self.violations = []
        self.stop_reason = None

        yield from self._scan(None, 0)

        if self.debug:
            logger.debug(f"Traversal stopped at {self.offset} of {self.data_size}")

    def run(self) -> TraversalReport:
        """Walk the whole container and collect the report"""
        events = list(self.walk())
        return TraversalReport(
            data_size=self.data_size,
            end_offset=self.offset,
            events=events,
            violations=list(self.violations),
            stop_reason=self.stop_reason,
        )

    def _scan(self, boundary: Optional[int], depth: int) -> Generator[BoxEvent, None, ScanExit]:
        """
        Scan boxes from self.offset at the given depth

        boundary is the exclusive end of the enclosing container, None at top level.
        """
        while self.offset < self.data_size:
            try:
                header = decode_header(self.data, self.offset, self.data_size)
            except BoxDecodeError as e:
                if self.debug:
                    logger.debug(f"Stopping traversal: {e}")
                self.stop_reason = e
                return ScanExit.STOPPED

            if boundary is not None and self.offset + header.total_size > boundary:
                if self.debug:
                    logger.debug(
                        f"Box {header.name} at {self.offset} claims {header.total_size} bytes, "
                        f"past parent end {boundary}"
                    )
                self.violations.append(
                    BoundaryViolation(
                        offset=self.offset,
                        depth=depth,
                        type_code=header.type_code,
                        claimed_size=header.total_size,
                        boundary=boundary,
                    )
                )
                self.offset = boundary
                return ScanExit.DISCARDED

            box_start = self.offset
            size = min(header.total_size, self.data_size - box_start)
            box_end = box_start + size

            region = None
            if header.type_code in self.dump_types:
                region = Region(box_start + header.header_length, size - header.header_length)

            if self.debug:
                logger.debug(f"Box {header.name} at {box_start}, depth={depth}, size={size}")

            yield BoxEvent(
                offset=box_start,
                depth=depth,
                type_code=header.type_code,
                size=size,
                header_length=header.header_length,
                region=region,
            )

            kind = classify(header.type_code)
            if isinstance(kind, Container) and depth < self.max_depth:
                # Children start after the header and the fixed fields, which may overrun the box
                self.offset = _fold(box_start + header.header_length + kind.extra_header_bytes, box_end)
                if self.offset < box_end:
                    result = yield from self._scan(box_end, depth + 1)
                    if result is ScanExit.STOPPED:
                        return result
                    if result is ScanExit.DISCARDED:
                        continue
            else:
                if isinstance(kind, Container):
                    logger.warning(
                        f"Nesting limit {self.max_depth} reached, not descending into "
                        f"{header.name} at {box_start}"
                    )
                self.offset = box_end
                if boundary is not None:
                    self.offset = _fold(self.offset, boundary)

            if boundary is not None and self.offset >= boundary:
                return ScanExit.CLOSED

        return ScanExit.CLOSED


def inspect(
    data,
    dump_types: Iterable[Union[str, bytes]] = (),
    max_depth: int = MAX_DEPTH,
    debug: bool = False,
) -> TraversalReport:
    """Traverse data and return the full report"""
    return BoxWalker(data, dump_types=dump_types, max_depth=max_depth, debug=debug).run()
