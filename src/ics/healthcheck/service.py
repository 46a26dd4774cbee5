from ics.models import FormatsInfo


class HealthCheckService:
    _formats_info: FormatsInfo | None = None

    def set_formats_info(self, formats_info: FormatsInfo):
        assert formats_info is not None, "formats_info is required"

        self._formats_info = formats_info

    @property
    def formats_info(self) -> FormatsInfo:
        assert self._formats_info, "set_formats_info() was not called"
        return self._formats_info
