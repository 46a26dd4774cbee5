from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ConversionResult:
    data_uri: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
