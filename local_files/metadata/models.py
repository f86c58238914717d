"""Records describing entries known to Local Files."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class TrackRecord:
    """Normalized metadata for one playable file."""

    codec: Optional[str] = None
    format: Optional[str] = None
    size: Optional[int] = None
    bit_rate: Optional[int] = None
    sample_rate: Optional[int] = None
    bit_depth: Optional[int] = None
    channels: Optional[int] = None
    duration: Optional[int] = None
    title: Optional[str] = None
    album: Optional[str] = None
    artist: Optional[str] = None
    genre: Optional[str] = None
    year: Optional[int] = None
    uri: Optional[str] = None
    contents: Optional[str] = None
    type: str = field(default='track', init=False)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FolderRecord:
    """The synthetic root folder. No nested listing is computed."""

    uri: str = 'file:/'
    title: str = 'Local'
    library_path: str = '/'
    contents: Tuple[str, ...] = ()
    type: str = field(default='folder', init=False)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['contents'] = list(self.contents)
        return data


ROOT_FOLDER = FolderRecord()

LibraryEntry = Union[TrackRecord, FolderRecord]
