"""Shared fixtures: a two-group config and a stub ipmitool runner."""

from typing import List, Tuple

import pytest

from models import CommandResult, Config, Endpoint, Group, PowerAction


class StubCommander:
    """Stands in for IpmiCommander and records every invocation."""

    def __init__(self, result: CommandResult = None, exc: Exception = None):
        self.result = result or CommandResult(exit_succeeded=True, stdout="Chassis Power is on\n", stderr="", returncode=0)
        self.exc = exc
        self.calls: List[Tuple[Endpoint, PowerAction]] = []

    async def invoke(self, endpoint, action, timeout=None):
        self.calls.append((endpoint, action))
        if self.exc is not None:
            raise self.exc
        return self.result

    def returns(self, stdout="", stderr="", ok=True):
        self.result = CommandResult(exit_succeeded=ok, stdout=stdout, stderr=stderr, returncode=0 if ok else 1)
        return self


@pytest.fixture
def config():
    return Config(
        listen_port=8080,
        groups=(
            Group(
                name="g1",
                token="t1",
                endpoints=(
                    Endpoint(name="web1", address="10.0.0.5", username="admin", secret="pw1"),
                    Endpoint(name="web2", address="10.0.0.6", username="admin", secret="pw2"),
                ),
            ),
            Group(
                name="g2",
                token="t2",
                endpoints=(
                    Endpoint(name="db1", address="10.0.1.5", username="root", secret="pw3"),
                ),
            ),
        ),
    )


@pytest.fixture
def commander():
    return StubCommander()
