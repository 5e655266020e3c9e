import json

import pytest

from findings_engine.core.domain.exceptions import NotAuthorized
from tests.findings_engine.fakes import FakeLogger, FakeStore, ts
from findings_engine.infra.adapters.access_control import FileAccessControl


@pytest.fixture
def store():
    store = FakeStore()
    store.add_analysis("a1", ts(2024, 3, 1), project_id="proj", organization_id="org")
    store.add_analysis("b1", ts(2024, 3, 1), project_id="other", organization_id="org")
    return store


@pytest.fixture
def access_file(tmp_path):
    fp = tmp_path / "organizations.json"
    fp.write_text(json.dumps({
        "organizations": {
            "org": {"members": ["alice"], "projects": ["proj"]},
        },
    }), encoding="utf-8")
    return fp


def _access(access_file, store, logger=None, enforce=True):
    return FileAccessControl(access_file=access_file, store=store, logger=logger or FakeLogger(), enforce=enforce)


def test_member_may_read_analysis(access_file, store):
    _access(access_file, store).check_access("org", "proj", "a1", "alice")


@pytest.mark.parametrize(
    "org_id,project_id,analysis_id,user,reason",
    [
        ("nope", "proj", "a1", "alice", "unknown_organization"),
        ("org", "proj", "a1", "mallory", "not_a_member"),
        ("org", "other", "b1", "alice", "project_not_in_organization"),
        ("org", "proj", "b1", "alice", "analysis_not_in_project"),
        ("org", "proj", "missing", "alice", "analysis_not_in_project"),
    ],
)
def test_denials(access_file, store, org_id, project_id, analysis_id, user, reason):
    logger = FakeLogger()
    with pytest.raises(NotAuthorized) as exc:
        _access(access_file, store, logger).check_access(org_id, project_id, analysis_id, user)

    assert exc.value.message == "You are not authorized to perform this action."
    level, message, fields = logger.records[-1]
    assert (level, message, fields["reason"]) == ("warning", "access_denied", reason)


def test_project_access(access_file, store):
    access = _access(access_file, store)
    access.check_project_access("org", "proj", "alice")
    with pytest.raises(NotAuthorized):
        access.check_project_access("org", "proj", "bob")


def test_missing_file_denies(tmp_path, store):
    with pytest.raises(NotAuthorized):
        _access(tmp_path / "absent.json", store).check_project_access("org", "proj", "alice")


def test_unreadable_file_denies_and_logs(tmp_path, store):
    fp = tmp_path / "organizations.json"
    fp.write_text("{", encoding="utf-8")
    logger = FakeLogger()
    with pytest.raises(NotAuthorized):
        _access(fp, store, logger).check_project_access("org", "proj", "alice")
    assert logger.messages("error") == ["access_file_unreadable"]


def test_enforcement_disabled(tmp_path, store):
    access = _access(tmp_path / "absent.json", store, enforce=False)
    access.check_access("any", "thing", "goes", "")
    access.check_project_access("any", "thing", "")
