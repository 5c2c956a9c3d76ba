"""Tests for the ipmitool runner, using shell scripts in place of ipmitool."""

import asyncio
import os
import stat

import pytest

from errors import CommandLaunchError, CommandTimeoutError
from ipmi_commander import IpmiCommander
from models import Config, Endpoint, PowerAction

ENDPOINT = Endpoint(name="web1", address="10.0.0.5", username="admin", secret="pw1")


def fake_ipmitool(tmp_path, body):
    path = tmp_path / "ipmitool"
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


def test_build_args_keeps_password_out_of_argv():
    commander = IpmiCommander()
    args = commander.build_args(ENDPOINT, PowerAction.CYCLE)
    assert args == ["ipmitool", "-I", "lanplus", "-H", "10.0.0.5", "-U", "admin", "-E", "power", "cycle"]
    assert "pw1" not in args


def test_build_env_carries_password():
    env = IpmiCommander().build_env(ENDPOINT)
    assert env["IPMI_PASSWORD"] == "pw1"


def test_from_config():
    config = Config(listen_port=1, ipmitool_path="/opt/ipmitool", ipmi_interface="lan", command_timeout=5.0)
    commander = IpmiCommander.from_config(config)
    assert commander.build_args(ENDPOINT, PowerAction.STATUS)[:3] == ["/opt/ipmitool", "-I", "lan"]
    assert commander.timeout == 5.0


async def test_invoke_captures_output(tmp_path):
    tool = fake_ipmitool(tmp_path, 'echo "Chassis Power is on"\necho "note" >&2\n')
    result = await IpmiCommander(ipmitool_path=tool).invoke(ENDPOINT, PowerAction.STATUS)
    assert result.exit_succeeded
    assert result.returncode == 0
    assert result.stdout.strip() == "Chassis Power is on"
    assert result.stderr.strip() == "note"


async def test_invoke_reports_failure(tmp_path):
    tool = fake_ipmitool(
        tmp_path, 'echo "Error: Unable to establish IPMI v2 / RMCP+ session" >&2\nexit 1\n'
    )
    result = await IpmiCommander(ipmitool_path=tool).invoke(ENDPOINT, PowerAction.ON)
    assert not result.exit_succeeded
    assert result.returncode == 1
    assert "RMCP+" in result.stderr


async def test_secret_with_shell_metacharacters_is_passed_verbatim(tmp_path):
    marker = tmp_path / "pwned"
    secret = f"x'; touch {marker}; echo '$(id) `id` && |"
    endpoint = Endpoint(name="web1", address="10.0.0.5", username="admin", secret=secret)
    tool = fake_ipmitool(
        tmp_path,
        'printf "%s" "$IPMI_PASSWORD"\nprintf "%s\\n" "$@" >&2\n',
    )
    result = await IpmiCommander(ipmitool_path=tool).invoke(endpoint, PowerAction.STATUS)
    assert result.stdout == secret
    assert result.stderr.split("\n")[:8] == ["-I", "lanplus", "-H", "10.0.0.5", "-U", "admin", "-E", "power"]
    assert not marker.exists()


async def test_missing_binary_raises_launch_error(tmp_path):
    commander = IpmiCommander(ipmitool_path=str(tmp_path / "no-such-ipmitool"))
    with pytest.raises(CommandLaunchError):
        await commander.invoke(ENDPOINT, PowerAction.STATUS)


async def test_hung_command_times_out(tmp_path):
    tool = fake_ipmitool(tmp_path, "exec sleep 10\n")
    commander = IpmiCommander(ipmitool_path=tool, timeout=0.2)
    with pytest.raises(CommandTimeoutError):
        await commander.invoke(ENDPOINT, PowerAction.STATUS)


def process_gone(pid):
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return True
    return False


async def wait_for_pid(pidfile):
    for _ in range(200):
        if pidfile.exists() and pidfile.read_text().strip():
            return int(pidfile.read_text())
        await asyncio.sleep(0.01)
    raise AssertionError("fake ipmitool never started")


async def test_timed_out_child_is_killed_and_reaped(tmp_path):
    pidfile = tmp_path / "pid"
    tool = fake_ipmitool(tmp_path, f'echo $$ > "{pidfile}"\nexec sleep 10\n')
    commander = IpmiCommander(ipmitool_path=tool, timeout=0.5)
    with pytest.raises(CommandTimeoutError):
        await commander.invoke(ENDPOINT, PowerAction.STATUS)
    assert process_gone(await wait_for_pid(pidfile))


async def test_cancelled_invoke_kills_child(tmp_path):
    pidfile = tmp_path / "pid"
    tool = fake_ipmitool(tmp_path, f'echo $$ > "{pidfile}"\nexec sleep 10\n')
    commander = IpmiCommander(ipmitool_path=tool, timeout=30)
    task = asyncio.create_task(commander.invoke(ENDPOINT, PowerAction.OFF))
    pid = await wait_for_pid(pidfile)
    assert not process_gone(pid)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert process_gone(pid)
