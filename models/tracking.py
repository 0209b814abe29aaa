from pydantic import BaseModel


class TrackingScanDTO(BaseModel):
    date: str | None = None
    activity: str | None = None
    location: str | None = None


class TrackingSnapshotDTO(BaseModel):
    """
    Scan events of a shipment as reported by the courier aggregator.

    Fetched live and never persisted. The aggregator reports scans in
    chronological ascending order and this order is kept as-is.
    """
    awb_code: str | None = None
    scans: list[TrackingScanDTO] = []

    def most_recent_first(self) -> list[TrackingScanDTO]:
        return list(reversed(self.scans))

    @property
    def last_scan(self) -> TrackingScanDTO | None:
        return self.scans[-1] if self.scans else None
