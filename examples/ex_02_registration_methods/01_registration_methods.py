"""Registration methods.

``add_instance`` binds a pre-built object, ``add_concrete`` a class built
through constructor selection, ``add_factory`` a callable whose parameters are
injected, and ``add_method`` a callback receiving the activation context.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from scopewire import Context, Scope


class Settings:
    def __init__(self, api_url: str) -> None:
        self.api_url = api_url


class Transport(ABC):
    @abstractmethod
    def name(self) -> str: ...


class HttpTransport(Transport):
    def name(self) -> str:
        return "http"


class ApiClient:
    def __init__(self, settings: Settings, transport: Transport) -> None:
        self.settings = settings
        self.transport = transport


class AuditTrail:
    def __init__(self, owner: str) -> None:
        self.owner = owner


def build_client(settings: Settings, transport: Transport) -> ApiClient:
    return ApiClient(settings, transport)


def build_audit_trail(context: Context) -> AuditTrail:
    return AuditTrail(owner=repr(context.scope))


def main() -> None:
    with Scope(name="app") as scope:
        scope.add_instance(Settings(api_url="https://api.example.com"))
        scope.add_concrete(HttpTransport, provides=Transport)
        scope.add_factory(build_client)
        scope.add_method(build_audit_trail)

        client = scope.get(ApiClient)
        print(f"api_url={client.settings.api_url}")  # => api_url=https://api.example.com
        print(f"transport={client.transport.name()}")  # => transport=http

        trail = scope.get(AuditTrail)
        print(f"audit_owner={trail.owner}")  # => audit_owner=Scope('app')

        client = scope.get(ApiClient, arguments={"settings": Settings(api_url="http://local")})
        print(f"override={client.settings.api_url}")  # => override=http://local


if __name__ == "__main__":
    main()
