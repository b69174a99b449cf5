# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""
Unit tests for the token service, access guard, event registry,
member directory and roster loading.
Run: pytest test_services.py -v
"""

import json
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest
from jose import jwt
from pydantic import ValidationError as PydanticValidationError

from membership.core.exceptions import (
    Conflict,
    ExpiredToken,
    Forbidden,
    InvalidToken,
    NotFound,
    SourceMissing,
    Unauthenticated,
    ValidationError,
)
from membership.core.logging import JSONFormatter
from membership.models.domain import Identity, Member, normalize_role
from membership.repositories.member_repository import MemberDirectory
from membership.services.access_guard import AccessGuard
from membership.services.event_service import EventRegistry
from membership.services.roster_source import (
    ExcelRosterSource,
    StaticRosterSource,
    build_member,
    coerce_identifier,
)
from membership.services.token_service import TokenService

SECRET = "test-secret"
PRIVILEGED = ("President", "Vice-President")
FUTURE = int(time.time()) + 3600


@pytest.fixture
def tokens():
    return TokenService(secret=SECRET, ttl_hours=8)


@pytest.fixture
def guard(tokens):
    return AccessGuard(tokens)


@pytest.fixture
def registry():
    return EventRegistry()


@pytest.fixture
def workshop(registry):
    return registry.create_event("Workshop", None, ["08:00", "09:00"], ["Attendee", "Host"])


# ============================================
# Token service
# ============================================
class TestTokenService:
    def test_issue_then_verify_round_trip(self, tokens):
        identity = tokens.verify(tokens.issue(1001, "Member"))
        assert identity == Identity(identifier=1001, role="Member")

    def test_expiry_is_eight_hours_after_issue(self, tokens):
        now = datetime.now(timezone.utc)
        claims = jwt.get_unverified_claims(tokens.issue(1001, "Member", now=now))
        assert claims["exp"] - claims["iat"] == 8 * 3600
        assert claims["matricula"] == 1001
        assert claims["rol"] == "Member"

    def test_token_past_expiry_is_expired(self, tokens):
        issued = datetime.now(timezone.utc) - timedelta(hours=8, minutes=1)
        with pytest.raises(ExpiredToken):
            tokens.verify(tokens.issue(1001, "Member", now=issued))

    def test_token_just_inside_window_is_valid(self, tokens):
        issued = datetime.now(timezone.utc) - timedelta(hours=7, minutes=59)
        assert tokens.verify(tokens.issue(1001, "Member", now=issued)).identifier == 1001

    def test_wrong_secret_is_invalid(self, tokens):
        foreign = TokenService(secret="another-secret").issue(1001, "Member")
        with pytest.raises(InvalidToken):
            tokens.verify(foreign)

    def test_tampered_payload_is_invalid(self, tokens):
        header, _payload, signature = tokens.issue(1001, "Member").split(".")
        forged_payload = jwt.encode({"matricula": 1, "rol": "President"}, "x").split(".")[1]
        with pytest.raises(InvalidToken):
            tokens.verify(".".join([header, forged_payload, signature]))

    def test_garbage_is_invalid(self, tokens):
        with pytest.raises(InvalidToken):
            tokens.verify("garbage")

    @pytest.mark.parametrize(
        "claims",
        [
            {"rol": "Member", "exp": FUTURE},
            {"matricula": "1001", "rol": "Member", "exp": FUTURE},
            {"matricula": 1001, "exp": FUTURE},
            {"matricula": 1001, "rol": "", "exp": FUTURE},
            {"matricula": 1001, "rol": "Member"},
        ],
    )
    def test_malformed_claims_are_invalid(self, tokens, claims):
        with pytest.raises(InvalidToken):
            tokens.verify(jwt.encode(claims, SECRET, algorithm="HS256"))

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenService(secret="")


# ============================================
# Access guard
# ============================================
class TestAccessGuard:
    def test_no_roles_admits_any_valid_token(self, guard, tokens):
        identity = guard.authorize(tokens.issue(1001, "Member"))
        assert identity.identifier == 1001

    @pytest.mark.parametrize("token", [None, "", "   "])
    def test_missing_token_unauthenticated(self, guard, token):
        with pytest.raises(Unauthenticated):
            guard.authorize(token)

    def test_invalid_token_unauthenticated(self, guard):
        with pytest.raises(Unauthenticated) as exc_info:
            guard.authorize("not.a.token")
        assert exc_info.value.message == "Invalid or expired token"

    def test_expired_token_unauthenticated(self, guard, tokens):
        issued = datetime.now(timezone.utc) - timedelta(hours=9)
        with pytest.raises(Unauthenticated) as exc_info:
            guard.authorize(tokens.issue(1001, "Member", now=issued))
        assert exc_info.value.message == "Invalid or expired token"

    def test_role_outside_set_forbidden(self, guard, tokens):
        with pytest.raises(Forbidden):
            guard.authorize(tokens.issue(1001, "Member"), PRIVILEGED)

    def test_role_inside_set_allowed(self, guard, tokens):
        identity = guard.authorize(tokens.issue(2001, "President"), PRIVILEGED)
        assert identity.role == "President"

    def test_role_comparison_normalised(self, guard, tokens):
        identity = guard.authorize(tokens.issue(2002, "  vice-PRESIDENT "), PRIVILEGED)
        assert identity.identifier == 2002

    def test_normalize_role(self):
        assert normalize_role("  Vice   President ") == "vice president"


# ============================================
# Event registry
# ============================================
class TestCreateEvent:
    def test_create_returns_event_with_no_registrations(self, workshop):
        assert workshop.id == 1
        assert workshop.name == "Workshop"
        assert workshop.description == ""
        assert workshop.time_slots == ["08:00", "09:00"]
        assert workshop.registrations == []

    def test_ids_strictly_increase(self, registry):
        ids = [registry.create_event(f"E{i}", "", ["a"], ["b"]).id for i in range(3)]
        assert ids == [1, 2, 3]

    @pytest.mark.parametrize(
        "name, slots, roles",
        [
            ("", ["08:00"], ["Attendee"]),
            ("  ", ["08:00"], ["Attendee"]),
            (None, ["08:00"], ["Attendee"]),
            ("Workshop", [], ["Attendee"]),
            ("Workshop", ["08:00"], []),
            ("Workshop", ["08:00", " "], ["Attendee"]),
            ("Workshop", "08:00", ["Attendee"]),
        ],
    )
    def test_invalid_input_creates_nothing(self, registry, name, slots, roles):
        with pytest.raises(ValidationError):
            registry.create_event(name, "", slots, roles)
        assert registry.list_events() == []

    def test_failed_create_does_not_consume_id(self, registry):
        with pytest.raises(ValidationError):
            registry.create_event("", "", ["a"], ["b"])
        assert registry.create_event("ok", "", ["a"], ["b"]).id == 1

    def test_duplicate_options_collapsed(self, registry):
        event = registry.create_event("W", "", ["08:00", "08:00 ", "09:00"], ["A", "A"])
        assert event.time_slots == ["08:00", "09:00"]
        assert event.role_options == ["A"]

    def test_concurrent_creation_assigns_unique_ids(self, registry):
        with ThreadPoolExecutor(max_workers=8) as pool:
            events = list(pool.map(
                lambda i: registry.create_event(f"E{i}", "", ["a"], ["b"]), range(50)
            ))
        ids = sorted(e.id for e in events)
        assert ids == list(range(1, 51))

    def test_clear_resets_ids(self, registry, workshop):
        registry.clear()
        assert registry.list_events() == []
        assert registry.create_event("again", "", ["a"], ["b"]).id == 1


class TestListEvents:
    def test_creation_order(self, registry):
        for name in ("first", "second", "third"):
            registry.create_event(name, "", ["a"], ["b"])
        assert [e.name for e in registry.list_events()] == ["first", "second", "third"]

    def test_snapshot_is_detached(self, registry, workshop):
        snapshot = registry.list_events()
        registry.register(workshop.id, 1001, "08:00", "Attendee")
        assert snapshot[0].registrations == []
        snapshot[0].registrations.append(None)
        assert len(registry.get_event(workshop.id).registrations) == 1

    def test_get_unknown_event(self, registry):
        with pytest.raises(NotFound):
            registry.get_event(99)


class TestRegister:
    def test_register_appends(self, registry, workshop):
        registration = registry.register(workshop.id, 1001, "08:00", "Attendee")
        assert registration.key() == (1001, "08:00", "Attendee")
        assert registry.get_event(workshop.id).registrations == [registration]

    def test_unknown_event(self, registry):
        with pytest.raises(NotFound):
            registry.register(5, 1001, "08:00", "Attendee")

    def test_invalid_slot(self, registry, workshop):
        with pytest.raises(ValidationError, match="time slot"):
            registry.register(workshop.id, 1001, "10:00", "Attendee")

    def test_invalid_role(self, registry, workshop):
        with pytest.raises(ValidationError, match="role"):
            registry.register(workshop.id, 1001, "08:00", "Speaker")

    def test_identical_triple_conflicts(self, registry, workshop):
        registry.register(workshop.id, 1001, "08:00", "Attendee")
        with pytest.raises(Conflict):
            registry.register(workshop.id, 1001, "08:00", "Attendee")

    def test_other_slot_or_role_allowed(self, registry, workshop):
        registry.register(workshop.id, 1001, "08:00", "Attendee")
        registry.register(workshop.id, 1001, "09:00", "Attendee")
        registry.register(workshop.id, 1001, "08:00", "Host")
        assert len(registry.get_event(workshop.id).registrations) == 3

    def test_concurrent_identical_registration_only_once(self, registry, workshop):
        outcomes = []
        barrier = threading.Barrier(10)

        def attempt():
            barrier.wait()
            try:
                registry.register(workshop.id, 1001, "08:00", "Attendee")
                outcomes.append("ok")
            except Conflict:
                outcomes.append("conflict")

        threads = [threading.Thread(target=attempt) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count("ok") == 1
        assert outcomes.count("conflict") == 9
        assert len(registry.get_event(workshop.id).registrations) == 1


# ============================================
# Member directory & roster
# ============================================
def _member(identifier, role="Member"):
    return Member(identifier=identifier, display_name=f"M{identifier}", role=role)


class TestMemberDirectory:
    def test_find_by_identifier(self):
        directory = MemberDirectory()
        directory.load(StaticRosterSource([_member(1001), _member(1002)]))
        assert directory.find_by_identifier(1002).display_name == "M1002"
        assert directory.find_by_identifier(9999) is None
        assert directory.count() == 2

    def test_duplicate_identifier_keeps_first(self):
        directory = MemberDirectory()
        loaded = directory.load(StaticRosterSource([_member(1001, "President"), _member(1001)]))
        assert len(loaded) == 1
        assert directory.find_by_identifier(1001).role == "President"

    def test_reload_replaces_contents(self):
        directory = MemberDirectory()
        directory.load(StaticRosterSource([_member(1001)]))
        directory.load(StaticRosterSource([_member(1002)]))
        assert [m.identifier for m in directory.get_all()] == [1002]

    def test_member_is_immutable(self):
        member = _member(1001)
        with pytest.raises(PydanticValidationError):
            member.role = "President"


class TestBuildMember:
    def test_full_row(self):
        member = build_member({
            "Matrícula": 202012345,
            "Nombres": " Ana Maria ",
            "Apellidos": "Torres Vera",
            "Correo ESPOL": "anatorr@espol.edu.ec",
            "Cargo dentro del club": "President",
        })
        assert member.identifier == 202012345
        assert member.display_name == "Ana Maria Torres Vera"
        assert member.contact_email == "anatorr@espol.edu.ec"
        assert member.role == "President"

    def test_blank_role_defaults(self):
        member = build_member({"matricula": "1001", "Nombres": "Ana", "Cargo dentro del club": "  "})
        assert member.role == "Member"

    def test_explicit_default_role(self):
        member = build_member({"matricula": 1001}, default_role="Miembro")
        assert member.role == "Miembro"
        assert member.display_name == ""

    def test_missing_identifier(self):
        assert build_member({"Nombres": "Ana"}) is None

    @pytest.mark.parametrize(
        "value, expected",
        [(1001, 1001), (1001.0, 1001), (" 1001 ", 1001), (1001.5, None),
         ("abc", None), (None, None), (float("nan"), None), (True, None)],
    )
    def test_coerce_identifier(self, value, expected):
        assert coerce_identifier(value) == expected


class TestExcelRosterSource:
    def _write(self, path, rows, sheet="Miembros"):
        pd.DataFrame(rows).to_excel(path, sheet_name=sheet, index=False)

    def test_reads_named_sheet(self, tmp_path):
        path = tmp_path / "members.xlsx"
        self._write(path, [
            {"Matrícula": 1001, "Nombres": "Ana", "Apellidos": "Torres",
             "Correo ESPOL": "ana@espol.edu.ec", "Cargo dentro del club": "President"},
            {"Matrícula": 1002, "Nombres": "Luis", "Apellidos": "Vera",
             "Correo ESPOL": "luis@espol.edu.ec", "Cargo dentro del club": None},
        ])
        members = ExcelRosterSource(path, "Miembros").load()
        assert [m.identifier for m in members] == [1001, 1002]
        assert members[0].display_name == "Ana Torres"
        assert members[0].role == "President"
        assert members[1].role == "Member"

    def test_rows_without_identifier_skipped(self, tmp_path):
        path = tmp_path / "members.xlsx"
        self._write(path, [
            {"matricula": 1001, "Nombres": "Ana"},
            {"matricula": "n/a", "Nombres": "Nobody"},
        ])
        assert [m.identifier for m in ExcelRosterSource(path, "Miembros").load()] == [1001]

    def test_missing_sheet(self, tmp_path):
        path = tmp_path / "members.xlsx"
        self._write(path, [{"matricula": 1001}], sheet="Other")
        with pytest.raises(SourceMissing):
            ExcelRosterSource(path, "Miembros").load()

    def test_missing_identifier_column(self, tmp_path):
        path = tmp_path / "members.xlsx"
        self._write(path, [{"Nombres": "Ana"}])
        with pytest.raises(SourceMissing):
            ExcelRosterSource(path, "Miembros").load()

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceMissing):
            ExcelRosterSource(tmp_path / "nope.xlsx", "Miembros").load()

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "members.xlsx"
        path.write_text("not excel")
        with pytest.raises(SourceMissing, match="not a readable workbook"):
            ExcelRosterSource(path, "Miembros").load()

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "members.csv"
        path.write_text("matricula\n1001\n")
        with pytest.raises(SourceMissing):
            ExcelRosterSource(path, "Miembros").load()

    def test_directory_loads_from_excel(self, tmp_path):
        path = tmp_path / "members.xlsx"
        self._write(path, [{"matricula": 1001, "Nombres": "Ana", "Apellidos": "Torres"}])
        directory = MemberDirectory()
        directory.load(ExcelRosterSource(path, "Miembros"))
        assert directory.find_by_identifier(1001).display_name == "Ana Torres"


# ============================================
# Logging
# ============================================
class TestJSONFormatter:
    def _record(self, **extra):
        record = logging.LogRecord(
            "membership.test", logging.INFO, __file__, 1, "Login: role=%s", ("Member",), None
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_context_fields_emitted(self):
        line = json.loads(JSONFormatter().format(self._record(matricula=1001, event_id=3)))
        assert line["message"] == "Login: role=Member"
        assert line["matricula"] == 1001
        assert line["event_id"] == 3
        assert "request_id" not in line

    def test_plain_record(self):
        line = json.loads(JSONFormatter().format(self._record()))
        assert line["level"] == "INFO"
        assert line["logger"] == "membership.test"
        assert not {"matricula", "event_id", "request_id"} & set(line)
