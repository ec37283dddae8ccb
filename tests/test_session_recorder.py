from datetime import date, datetime

import pytest
from sqlalchemy.orm import sessionmaker

from charsheet.core.database import atomic
from charsheet.core.errors import ConcurrentUpdateError, NotFoundError, ValidationFailed
from charsheet.models import (
    Character,
    InsanitySymptom,
    PlaySession,
    SanityHistory,
    Scenario,
    SkillHistory,
)
from charsheet.schemas.session import SessionReport
from charsheet.services.session_recorder import SessionRecorder, find_or_create_scenario


def _report(**overrides):
    data = {
        "scenarioTitle": "悪霊の家",
        "kpName": "鈴木",
        "playDate": "2024-05-01",
        "skillGrowth": [{"skillName": "spotHidden", "oldValue": 40, "newValue": 47}],
        "sanityLoss": 10,
        "insanitySymptoms": [],
    }
    data.update(overrides)
    return SessionReport.model_validate(data)


def test_record_session_round_trip(db, make_character):
    character = make_character(skills={"spotHidden": 40}, san=50, max_san=65)

    result = SessionRecorder(db).record(character.id, _report())

    db.refresh(character)
    assert character.skills["spotHidden"] == 47
    assert character.san == 40

    skill_rows = db.query(SkillHistory).filter(SkillHistory.session_id == result.session.id).all()
    assert [(r.skill_name, r.old_value, r.new_value) for r in skill_rows] == [("spotHidden", 40, 47)]
    assert skill_rows[0].reason == "悪霊の家での成長"

    sanity_rows = db.query(SanityHistory).filter(SanityHistory.session_id == result.session.id).all()
    assert [(r.old_value, r.new_value) for r in sanity_rows] == [(50, 40)]
    assert sanity_rows[0].reason == "悪霊の家でのSAN値減少"

    assert result.scenario.title == "悪霊の家"
    assert result.session.play_date == date(2024, 5, 1)
    assert result.summary == {"skill_growth_count": 1, "sanity_loss": 10, "insanity_count": 0}


def test_no_sanity_row_without_loss(db, make_character):
    character = make_character(san=50)

    SessionRecorder(db).record(character.id, _report(sanityLoss=0, skillGrowth=[]))

    db.refresh(character)
    assert character.san == 50
    assert db.query(SanityHistory).count() == 0
    assert db.query(PlaySession).count() == 1


def test_sanity_floors_at_zero(db, make_character):
    character = make_character(san=5)

    result = SessionRecorder(db).record(character.id, _report(sanityLoss=12, skillGrowth=[]))

    db.refresh(character)
    assert character.san == 0
    assert result.summary["sanity_loss"] == 5


def test_blank_symptom_names_are_skipped(db, make_character):
    character = make_character()

    result = SessionRecorder(db).record(character.id, _report(insanitySymptoms=[
        {"type": "phobia", "name": "  閉所恐怖症 ", "description": "狭い場所が怖い"},
        {"type": "mania", "name": "   "},
    ]))

    symptoms = db.query(InsanitySymptom).all()
    assert len(symptoms) == 1
    assert symptoms[0].symptom_name == "閉所恐怖症"
    assert symptoms[0].symptom_type == "phobia"
    assert symptoms[0].is_recovered is False
    assert result.summary["insanity_count"] == 1


def test_failure_mid_transaction_leaves_nothing(db, make_character, monkeypatch):
    character = make_character(skills={"spotHidden": 40}, san=50)

    def broken_symptom(**kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr("charsheet.services.session_recorder.InsanitySymptom", broken_symptom)

    with pytest.raises(RuntimeError):
        SessionRecorder(db).record(character.id, _report(insanitySymptoms=[
            {"type": "indefinite", "name": "健忘症"},
        ]))

    assert db.query(PlaySession).count() == 0
    assert db.query(Scenario).count() == 0
    assert db.query(SkillHistory).count() == 0
    assert db.query(SanityHistory).count() == 0
    db.refresh(character)
    assert character.skills["spotHidden"] == 40
    assert character.san == 50


def test_existing_scenario_is_reused(db, make_character):
    character = make_character()
    older = Scenario(id="scn_older", title="悪霊の家", author="A", created_at=datetime(2020, 1, 1))
    newer = Scenario(id="scn_newer", title="悪霊の家", author="B", created_at=datetime(2021, 1, 1))
    db.add_all([newer, older])
    db.commit()

    result = SessionRecorder(db).record(character.id, _report())

    assert result.scenario.id == "scn_older"
    assert db.query(Scenario).count() == 2


def test_new_scenario_takes_first_author(db):
    first = find_or_create_scenario(db, "狂気山脈", author="初代")
    again = find_or_create_scenario(db, "狂気山脈", author="別人")
    db.commit()

    assert again.id == first.id
    assert again.author == "初代"


def test_missing_character(db):
    with pytest.raises(NotFoundError):
        SessionRecorder(db).record("char_missing", _report())
    assert db.query(Scenario).count() == 0


def test_blank_title_rejected_before_any_write(db, make_character):
    character = make_character()

    with pytest.raises(ValidationFailed):
        SessionRecorder(db).record(character.id, _report(scenarioTitle="   "))
    assert db.query(Scenario).count() == 0
    assert db.query(PlaySession).count() == 0


def test_delete_session_cascades(db, make_character):
    character = make_character()
    recorder = SessionRecorder(db)
    result = recorder.record(character.id, _report(insanitySymptoms=[{"type": "mania", "name": "収集癖"}]))

    recorder.delete_session(result.session.id)

    assert db.query(PlaySession).count() == 0
    assert db.query(SkillHistory).count() == 0
    assert db.query(SanityHistory).count() == 0
    assert db.query(InsanitySymptom).count() == 0
    # current values stay as they are
    db.refresh(character)
    assert character.san == 55


def test_symptom_recovery_toggles_timestamp(db, make_character):
    character = make_character()
    recorder = SessionRecorder(db)
    recorder.record(character.id, _report(insanitySymptoms=[{"type": "mania", "name": "収集癖"}]))
    symptom = db.query(InsanitySymptom).one()

    recovered = recorder.set_symptom_recovery(symptom.id, True)
    assert recovered.is_recovered is True
    assert recovered.recovered_at is not None

    relapsed = recorder.set_symptom_recovery(symptom.id, False)
    assert relapsed.is_recovered is False
    assert relapsed.recovered_at is None


def test_stale_character_write_is_rejected(engine, make_character):
    character = make_character(san=50)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    first, second = Session(), Session()
    try:
        mine = first.get(Character, character.id)
        theirs = second.get(Character, character.id)

        with atomic(second):
            theirs.san = 30

        with pytest.raises(ConcurrentUpdateError):
            with atomic(first):
                mine.san = 20

        first.expire_all()
        assert first.get(Character, character.id).san == 30
    finally:
        first.close()
        second.close()
