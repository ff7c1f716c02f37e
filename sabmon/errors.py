class SabmonError(Exception):
    """Base class for all sabmon errors."""


class ConfigError(SabmonError):
    """Required configuration is missing. Fatal at startup."""


class UpstreamError(SabmonError):
    """The SABnzbd API could not deliver a usable queue status."""


class UpstreamConnectionError(UpstreamError):
    pass


class UpstreamStatusError(UpstreamError):
    def __init__(self, status: int):
        super().__init__(f"API returned non-OK status: {status}")
        self.status = status


class UpstreamDecodeError(UpstreamError):
    pass
