import pytest

from app.domain import services as domain_services
from app.domain.enums import CodePurpose

ALICE = "alice@example.com"


def test_issue_returns_code_and_verify_succeeds(vault):
    code = vault.issue(ALICE, CodePurpose.VERIFICATION)
    assert code == "482913"
    assert vault.verify(ALICE, "482913", CodePurpose.VERIFICATION) is True


def test_wrong_code_fails_and_leaves_record_usable(vault):
    vault.issue(ALICE, CodePurpose.VERIFICATION)
    assert vault.verify(ALICE, "000000", CodePurpose.VERIFICATION) is False
    assert vault.verify(ALICE, "482913", CodePurpose.VERIFICATION) is True


def test_wrong_purpose_fails(vault):
    vault.issue(ALICE, CodePurpose.VERIFICATION)
    assert vault.verify(ALICE, "482913", CodePurpose.PASSWORD_RESET) is False
    # not consumed by the mismatch
    assert vault.verify(ALICE, "482913", CodePurpose.VERIFICATION) is True


def test_purpose_accepts_plain_string(vault):
    vault.issue(ALICE, "password-reset")
    assert vault.verify(ALICE, "482913", "password-reset") is True


def test_no_record_fails(vault):
    result = vault.verify("nobody@example.com", "482913", CodePurpose.VERIFICATION)
    assert result is False


def test_expired_code_fails_and_is_purged(vault, store, clock):
    vault.issue(ALICE, CodePurpose.VERIFICATION)
    clock.advance(minutes=10, seconds=1)
    assert vault.verify(ALICE, "482913", CodePurpose.VERIFICATION) is False
    assert store.get(ALICE) is None


def test_code_still_valid_at_exact_expiry(vault, clock):
    vault.issue(ALICE, CodePurpose.VERIFICATION)
    clock.advance(minutes=10)
    assert vault.verify(ALICE, "482913", CodePurpose.VERIFICATION) is True


def test_second_issue_supersedes_first(vault, monkeypatch):
    codes = iter(["111111", "222222"])
    monkeypatch.setattr(
        domain_services, "generate_numeric_code", lambda length=6: next(codes)
    )
    first = vault.issue(ALICE, CodePurpose.VERIFICATION)
    second = vault.issue(ALICE, CodePurpose.VERIFICATION)

    assert vault.verify(ALICE, first, CodePurpose.VERIFICATION) is False
    assert vault.verify(ALICE, second, CodePurpose.VERIFICATION) is True


def test_reissue_for_other_purpose_replaces_record(vault):
    vault.issue(ALICE, CodePurpose.VERIFICATION)
    vault.issue(ALICE, CodePurpose.PASSWORD_RESET)
    assert vault.verify(ALICE, "482913", CodePurpose.VERIFICATION) is False
    assert vault.verify(ALICE, "482913", CodePurpose.PASSWORD_RESET) is True


def test_verify_does_not_consume(vault):
    vault.issue(ALICE, CodePurpose.PASSWORD_RESET)
    assert vault.verify(ALICE, "482913", CodePurpose.PASSWORD_RESET) is True
    assert vault.verify(ALICE, "482913", CodePurpose.PASSWORD_RESET) is True


def test_issue_verify_invalidate_then_replay_fails(vault):
    code = vault.issue(ALICE, CodePurpose.VERIFICATION)
    assert vault.verify(ALICE, code, CodePurpose.VERIFICATION) is True
    vault.invalidate(ALICE)
    assert vault.verify(ALICE, code, CodePurpose.VERIFICATION) is False


def test_invalidate_unknown_subject_is_noop(vault):
    vault.invalidate("ghost@example.com")


def test_code_is_stored_hashed(vault, store, clock):
    vault.issue(ALICE, CodePurpose.VERIFICATION)
    record = store.get(ALICE)
    assert record is not None
    assert "482913" not in (record.salt_b64, record.digest_b64)
    assert record.issued_at == clock.now
    assert (record.expires_at - record.issued_at).total_seconds() == 600


def test_subjects_are_independent(vault):
    vault.issue(ALICE, CodePurpose.VERIFICATION)
    vault.issue("bob@example.com", CodePurpose.PASSWORD_RESET)
    vault.invalidate(ALICE)
    assert vault.verify("bob@example.com", "482913", CodePurpose.PASSWORD_RESET)


def test_sweep_removes_only_expired(vault, store, clock):
    vault.issue(ALICE, CodePurpose.VERIFICATION)
    clock.advance(minutes=6)
    vault.issue("bob@example.com", CodePurpose.VERIFICATION)
    clock.advance(minutes=5)

    assert vault.sweep_expired() == 1
    assert store.get(ALICE) is None
    assert store.get("bob@example.com") is not None
    assert vault.sweep_expired() == 0


def test_unknown_purpose_rejected_on_issue(vault):
    with pytest.raises(ValueError):
        vault.issue(ALICE, "login")


def test_lock_stripes_must_be_positive(store):
    from app.domain.code_vault import CodeVault

    with pytest.raises(ValueError):
        CodeVault(store, lock_stripes=0)


def test_unknown_purpose_on_verify_is_just_false(vault):
    vault.issue(ALICE, CodePurpose.VERIFICATION)
    assert vault.verify(ALICE, "482913", "login") is False


def _codes(monkeypatch, *codes):
    it = iter(codes)
    monkeypatch.setattr(
        domain_services, "generate_numeric_code", lambda length=6: next(it)
    )


def test_issuing_keeps_new_code_when_block_succeeds(vault, monkeypatch):
    _codes(monkeypatch, "111111", "222222")
    vault.issue("a@example.com", CodePurpose.PASSWORD_RESET)

    with vault.issuing("a@example.com", CodePurpose.PASSWORD_RESET) as code:
        assert code == "222222"

    assert vault.verify("a@example.com", "222222", CodePurpose.PASSWORD_RESET)
    assert not vault.verify("a@example.com", "111111", CodePurpose.PASSWORD_RESET)


def test_issuing_restores_previous_code_on_error(vault, monkeypatch):
    _codes(monkeypatch, "111111", "222222")
    vault.issue("a@example.com", CodePurpose.PASSWORD_RESET)

    with pytest.raises(RuntimeError):
        with vault.issuing("a@example.com", CodePurpose.PASSWORD_RESET):
            raise RuntimeError("delivery failed")

    assert vault.verify("a@example.com", "111111", CodePurpose.PASSWORD_RESET)
    assert not vault.verify("a@example.com", "222222", CodePurpose.PASSWORD_RESET)


def test_issuing_without_previous_code_leaves_nothing_on_error(vault, store):
    with pytest.raises(RuntimeError):
        with vault.issuing("a@example.com", CodePurpose.VERIFICATION):
            raise RuntimeError("delivery failed")

    assert store.get("a@example.com") is None


def test_issuing_does_not_clobber_a_newer_issue(vault, monkeypatch):
    _codes(monkeypatch, "111111", "222222", "333333")
    vault.issue("a@example.com", CodePurpose.VERIFICATION)

    with pytest.raises(RuntimeError):
        with vault.issuing("a@example.com", CodePurpose.VERIFICATION):
            vault.issue("a@example.com", CodePurpose.VERIFICATION)
            raise RuntimeError("delivery failed")

    assert vault.verify("a@example.com", "333333", CodePurpose.VERIFICATION)
