from dataclasses import dataclass


@dataclass
class ClipRequest:
    start: float               # seconds from video start
    end: float                 # seconds from video start, must be > start
    id: str | None = None      # client correlation id, echoed on the result

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass
class ClipResult:
    id: str | None
    file_name: str
    download_url: str          # empty when extraction failed
    message: str
    error: str | None = None
    strategy: str | None = None  # extraction strategy that produced the file

    @property
    def ok(self) -> bool:
        return self.error is None
