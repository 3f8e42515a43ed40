from concurrent.futures import ThreadPoolExecutor

from app.domain import services as domain_services
from app.domain.enums import CodePurpose


def test_concurrent_issue_for_many_subjects_keeps_every_record(vault, store):
    subjects = [f"user{i}@example.com" for i in range(200)]

    with ThreadPoolExecutor(max_workers=16) as pool:
        codes = list(
            pool.map(lambda s: vault.issue(s, CodePurpose.VERIFICATION), subjects)
        )

    assert len(store) == len(subjects)
    for subject, code in zip(subjects, codes):
        assert vault.verify(subject, code, CodePurpose.VERIFICATION)


def test_interleaved_issue_and_verify_on_one_subject(vault, monkeypatch):
    monkeypatch.setattr(
        domain_services, "generate_numeric_code", lambda length=6: "777777"
    )
    subject = "race@example.com"
    vault.issue(subject, CodePurpose.VERIFICATION)

    def issue() -> bool:
        vault.issue(subject, CodePurpose.VERIFICATION)
        return True

    def verify() -> bool:
        return vault.verify(subject, "777777", CodePurpose.VERIFICATION)

    with ThreadPoolExecutor(max_workers=8) as pool:
        futures = [pool.submit(issue if i % 2 else verify) for i in range(200)]
        results = [f.result() for f in futures]

    # every stored record carries the same code, so every read must match
    assert all(results)
