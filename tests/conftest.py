import os
import tempfile

# point the module-level engine and storage at a scratch directory before the app is imported
_SCRATCH = tempfile.mkdtemp(prefix="charsheet-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_SCRATCH}/default.db")
os.environ.setdefault("LOCAL_STORAGE_PATH", os.path.join(_SCRATCH, "uploads"))

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from charsheet.api.deps import get_db, get_storage
from charsheet.core.database import create_db_engine, init_db
from charsheet.main import app
from charsheet.models import Character
from charsheet.services.rules import derive_stats
from charsheet.services.skills import default_skills
from charsheet.services.storage import StorageService

SAMPLE_STATS = {
    "str": 13, "con": 12, "pow": 13, "dex": 11, "app": 10,
    "siz": 12, "int": 14, "edu": 16, "luck": 55,
}


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    yield session
    session.close()


@pytest.fixture
def storage(tmp_path):
    return StorageService(str(tmp_path / "uploads"))


@pytest.fixture
def client(db, storage):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_character(db):
    """Insert a character directly, bypassing the API."""

    def _make(name="山田太郎", skills=None, san=None, max_san=None, **fields):
        character = Character(
            id=f"char_{uuid.uuid4().hex[:8]}",
            name=name,
            skills={**default_skills(), **(skills or {})},
            **fields,
        )
        character.apply_stats(SAMPLE_STATS)
        character.apply_derived_stats(derive_stats(SAMPLE_STATS).model_dump())
        if san is not None:
            character.san = san
        if max_san is not None:
            character.max_san = max_san
        db.add(character)
        db.commit()
        db.refresh(character)
        return character

    return _make


IAKYARA_SAMPLE = """\
キャラクター保管所 テキスト出力

【基本情報】
名前: 山田太郎 (やまだたろう)
職業: 私立探偵
年齢: 28 / 性別: 男性
出身: 東京

【能力値】
STR 13
CON 12
POW 13
DEX 11
APP 10
SIZ 12
INT 14
EDU 16
幸運 65
HP 10
MP 13
SAN 60
MOV 9
現在SAN値 60 / 99

【技能値】
回避 22 22
目星 65 25
図書館 70 25
母国語（日本語） 80 80
クトゥルフ神話 15 0
謎の技能 40 1

【メモ】
古書店で働いている。
図書館で調べ物をするのが得意。
"""


@pytest.fixture
def iakyara_text():
    """A complete Iakyara text export."""
    return IAKYARA_SAMPLE
