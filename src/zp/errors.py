from __future__ import annotations


class ZohoError(Exception):
    """Base class for every failure raised by the client."""


class TransportError(ZohoError):
    pass


class ServerError(ZohoError):
    def __init__(self, status: int, body: str = "") -> None:
        self.status = status
        self.body = body
        message = f"Zoho API returned {status}"
        if body:
            message = f"{message}: {body[:200]}"
        super().__init__(message)


class DecodeError(ZohoError):
    pass


class EmptyResponse(ZohoError):
    def __init__(self, uri: str) -> None:
        self.uri = uri
        super().__init__(f"No content returned from {uri}")


class DisallowedMethod(ZohoError):
    def __init__(self, method: str, resource: str) -> None:
        self.method = method
        self.resource = resource
        super().__init__(f"{method} is not supported for {resource}")


class RefreshFailure(ZohoError):
    pass


class ConfigError(ZohoError):
    pass


class MissingContext(ZohoError):
    pass


class MissingEntity(ZohoError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No entity named {name!r}")


class EmptyEntityList(ZohoError):
    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Zoho returned no {kind} entries")
