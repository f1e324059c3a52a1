"""Route dependencies - access to the process-wide PresenceRuntime."""

from fastapi import Request

from dynamic_rpc.runtime import PresenceRuntime


def get_runtime(request: Request) -> PresenceRuntime:
    return request.app.state.runtime
