import io

import pytest

from fakes import FakeDestination, FakeSource, RecordingConsumer, record, state, write_json
from harness.connectors.role import DestinationRole, SourceRole
from harness.errors import ConfigParseError, RoleError, UnknownCommandError, ValidationError
from harness.integration_config import IntegrationConfig
from harness.protocol import Status, Type, to_json_line
from harness.runner.dispatcher import CommandDispatcher
from harness.validation import SchemaValidator

VALID_CONFIG = {"host": "db.internal", "port": 5432}
INVALID_CONFIG = {"host": "db.internal"}
CATALOG = {"streams": [{"stream": {"name": "users"}}]}


@pytest.fixture
def files(tmp_path):
    return {
        "valid": write_json(tmp_path / "config.json", VALID_CONFIG),
        "invalid": write_json(tmp_path / "invalid.json", INVALID_CONFIG),
        "catalog": write_json(tmp_path / "catalog.json", CATALOG),
        "state": write_json(tmp_path / "state.json", {"users": {"cursor": 7}}),
    }


def _dispatcher(role, stdin=None):
    emitted = []
    return CommandDispatcher(role, emitted.append, SchemaValidator(), stdin=stdin), emitted


def test_spec_emits_the_connector_spec():
    dispatcher, emitted = _dispatcher(SourceRole(FakeSource()))

    dispatcher.execute(IntegrationConfig.spec())

    assert [message.type for message in emitted] == [Type.SPEC]
    assert emitted[0].spec.connection_specification["required"] == ["host", "port"]


def test_check_with_valid_config_emits_connector_status(files):
    source = FakeSource()
    dispatcher, emitted = _dispatcher(SourceRole(source))

    dispatcher.execute(IntegrationConfig.check(files["valid"]))

    assert len(emitted) == 1
    assert emitted[0].connection_status.status == Status.SUCCEEDED
    assert source.calls == ["check"]


def test_check_with_invalid_config_emits_failure_then_connector_status(files):
    source = FakeSource()
    dispatcher, emitted = _dispatcher(SourceRole(source))

    dispatcher.execute(IntegrationConfig.check(files["invalid"]))

    assert [message.type for message in emitted] == [Type.CONNECTION_STATUS, Type.CONNECTION_STATUS]
    failure = emitted[0].connection_status
    assert failure.status == Status.FAILED
    assert "Verification error(s) occurred for CHECK" in failure.message
    assert "'port' is a required property" in failure.message
    assert emitted[1].connection_status.message == "source reachable"
    assert source.calls == ["check"]


def test_check_works_for_destinations(files):
    destination = FakeDestination()
    dispatcher, emitted = _dispatcher(DestinationRole(destination))

    dispatcher.execute(IntegrationConfig.check(files["valid"]))

    assert emitted[0].connection_status.status == Status.FAILED
    assert destination.calls == ["check"]


def test_check_with_unreadable_config_aborts(tmp_path):
    dispatcher, emitted = _dispatcher(SourceRole(FakeSource()))

    with pytest.raises(ConfigParseError):
        dispatcher.execute(IntegrationConfig.check(tmp_path / "missing.json"))

    assert emitted == []


def test_discover_emits_catalog(files):
    dispatcher, emitted = _dispatcher(SourceRole(FakeSource()))

    dispatcher.execute(IntegrationConfig.discover(files["valid"]))

    assert [message.type for message in emitted] == [Type.CATALOG]
    assert emitted[0].catalog.streams[0].name == "users"


def test_read_forwards_source_messages_and_passes_state(files):
    messages = [record("users", 1), record("users", 2), state({"users": {"cursor": 2}})]
    source = FakeSource(messages)
    dispatcher, emitted = _dispatcher(SourceRole(source))

    dispatcher.execute(IntegrationConfig.read(files["valid"], files["catalog"], files["state"]))

    assert emitted == messages
    config, catalog, passed_state = source.read_args
    assert config == VALID_CONFIG
    assert catalog.streams[0].stream.name == "users"
    assert passed_state == {"users": {"cursor": 7}}
    assert source.released == 1


def test_read_without_state_passes_none(files):
    source = FakeSource([record("users", 1)])
    dispatcher, _ = _dispatcher(SourceRole(source))

    dispatcher.execute(IntegrationConfig.read(files["valid"], files["catalog"]))

    assert source.read_args[2] is None


def test_read_releases_iterator_when_source_fails(files):
    source = FakeSource([record("users", 1), record("users", 2)], fail_at=1)
    dispatcher, emitted = _dispatcher(SourceRole(source))

    with pytest.raises(RuntimeError):
        dispatcher.execute(IntegrationConfig.read(files["valid"], files["catalog"]))

    assert len(emitted) == 1
    assert source.released == 1


def test_write_drives_consumer_from_stdin(files):
    m1, m2 = record("users", 1), record("users", 2)
    consumer = RecordingConsumer()
    destination = FakeDestination(consumer)
    stdin = io.StringIO(f"{to_json_line(m1)}\nnot json\n{to_json_line(m2)}\n")
    dispatcher, emitted = _dispatcher(DestinationRole(destination), stdin=stdin)

    dispatcher.execute(IntegrationConfig.write(files["valid"], files["catalog"]))

    assert consumer.accepted == [m1, m2]
    assert consumer.events[0] == "start" and consumer.events[-1] == "close"
    assert destination.output_collector == emitted.append


@pytest.mark.parametrize(
    "build_config",
    [
        lambda files: IntegrationConfig.discover(files["invalid"]),
        lambda files: IntegrationConfig.read(files["invalid"], files["catalog"]),
    ],
    ids=["discover", "read"],
)
def test_invalid_config_aborts_source_commands_before_the_connector_runs(files, build_config):
    source = FakeSource([record("users", 1)])
    dispatcher, emitted = _dispatcher(SourceRole(source))

    with pytest.raises(ValidationError):
        dispatcher.execute(build_config(files))

    assert source.calls == []
    assert emitted == []


def test_invalid_config_aborts_write_before_the_consumer_exists(files):
    destination = FakeDestination()
    dispatcher, emitted = _dispatcher(DestinationRole(destination), stdin=io.StringIO(to_json_line(record("users", 1))))

    with pytest.raises(ValidationError) as excinfo:
        dispatcher.execute(IntegrationConfig.write(files["invalid"], files["catalog"]))

    assert excinfo.value.context == "WRITE"
    assert destination.calls == []
    assert destination.consumer.events == []
    assert emitted == []


def test_source_commands_rejected_for_destinations(files):
    dispatcher, _ = _dispatcher(DestinationRole(FakeDestination()))

    with pytest.raises(RoleError):
        dispatcher.execute(IntegrationConfig.discover(files["valid"]))
    with pytest.raises(RoleError):
        dispatcher.execute(IntegrationConfig.read(files["valid"], files["catalog"]))


def test_write_rejected_for_sources(files):
    source = FakeSource()
    dispatcher, _ = _dispatcher(SourceRole(source))

    with pytest.raises(RoleError):
        dispatcher.execute(IntegrationConfig.write(files["valid"], files["catalog"]))
    assert source.calls == []


def test_unknown_command_is_fatal():
    dispatcher, emitted = _dispatcher(SourceRole(FakeSource()))

    with pytest.raises(UnknownCommandError):
        dispatcher.execute(IntegrationConfig(command="rollback"))

    assert emitted == []
