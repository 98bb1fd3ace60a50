import random
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

import config
from api.app import create_app
from question_bank.models.question_model import Question, QuestionOption, QuestionType
from question_bank.models.topic_model import Topic
from question_bank.models.user_model import Role, User
from question_bank.services.auth_service import create_token, hash_password
from question_bank.services.store import Store

START = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
OPTIONS = [QuestionOption(id=i, content=f"보기 {i}") for i in "ABCD"]


class FakeClock:
    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_question(qid, topic_id, qtype, answer, score=5) -> Question:
    qtype = QuestionType(qtype)
    options = OPTIONS if qtype in (QuestionType.SINGLE, QuestionType.MULTIPLE) else None
    return Question(
        id=qid,
        topic_id=topic_id,
        type=qtype,
        content=f"문제 {qid}",
        options=options,
        answer=answer,
        analysis=f"해설 {qid}",
        score=score,
    )


def build_bank(store: Store) -> Store:
    """
    数学(math) ─ 代数(alg): single s1~s3, multiple m1, fill f1
               └ 几何(geo): single s4~s5, multiple m2, subjective j1
    物理(phys) ─ 力学(mech): single s6
    """
    for t in [
        Topic(id="math", name="数学"),
        Topic(id="alg", name="代数", parent_id="math"),
        Topic(id="geo", name="几何", parent_id="math"),
        Topic(id="phys", name="物理"),
        Topic(id="mech", name="力学", parent_id="phys"),
    ]:
        store.topics[t.id] = t
    for q in [
        make_question("s1", "alg", "single", "A"),
        make_question("s2", "alg", "single", "B"),
        make_question("s3", "alg", "single", "C"),
        make_question("m1", "alg", "multiple", ["A", "C"], score=8),
        make_question("f1", "alg", "fill", "50", score=4),
        make_question("s4", "geo", "single", "D"),
        make_question("s5", "geo", "single", "A"),
        make_question("m2", "geo", "multiple", ["B", "D"], score=8),
        make_question("j1", "geo", "subjective", "a² + b² = c²", score=10),
        make_question("s6", "mech", "single", "B"),
    ]:
        store.questions[q.id] = q
    return store


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    monkeypatch.setattr(config, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def store() -> Store:
    return build_bank(Store())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def users(store):
    created = {}
    for role in Role:
        user = User(
            id=f"u-{role.value}",
            username=role.value,
            email=f"{role.value}@example.com",
            role=role,
            password_hash=hash_password("123456"),
        )
        store.users[user.id] = user
        created[role.value] = user
    return created


@pytest.fixture
def headers(users):
    """역할별 Authorization 헤더."""
    return {name: {"Authorization": f"Bearer {create_token(u)}"} for name, u in users.items()}


@pytest.fixture
def client(store, clock, rng, users):
    app = create_app(store=store, clock=clock, rng=rng, seed_demo=False)
    with TestClient(app) as c:
        yield c
