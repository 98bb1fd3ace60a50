"""
api/sample_data.py — 개발용 데모 데이터 (과목/챕터, 예제 문제, 데모 계정)
"""

import logging

import config
from question_bank.models.question_model import Question, QuestionOption, QuestionType
from question_bank.models.topic_model import Topic
from question_bank.models.user_model import Role, User
from question_bank.services.auth_service import hash_password
from question_bank.services.store import Store

logger = logging.getLogger(__name__)

SAMPLE_TOPICS = [
    Topic(id="1", name="数学", parent_id=None, sort_order=1),
    Topic(id="2", name="代数", parent_id="1", sort_order=1),
    Topic(id="3", name="几何", parent_id="1", sort_order=2),
    Topic(id="4", name="语文", parent_id=None, sort_order=2),
    Topic(id="5", name="物理", parent_id=None, sort_order=3),
]

SAMPLE_QUESTIONS = [
    Question(
        id="1",
        topic_id="2",
        type=QuestionType.SINGLE,
        content="解方程: 2x + 5 = 13，求x的值。",
        options=[
            QuestionOption(id="A", content="x = 3"),
            QuestionOption(id="B", content="x = 4"),
            QuestionOption(id="C", content="x = 5"),
            QuestionOption(id="D", content="x = 6"),
        ],
        answer="B",
        analysis="2x + 5 = 13 → 2x = 8 → x = 4",
        difficulty=2,
        score=5,
        tags=["代数", "一元一次方程"],
    ),
    Question(
        id="2",
        topic_id="2",
        type=QuestionType.MULTIPLE,
        content="下列哪些是二次方程？",
        options=[
            QuestionOption(id="A", content="x² + 2x + 1 = 0"),
            QuestionOption(id="B", content="2x + 3 = 0"),
            QuestionOption(id="C", content="x² - 4 = 0"),
            QuestionOption(id="D", content="3x³ + 2x = 0"),
        ],
        answer=["A", "C"],
        analysis="二次方程是指最高次数为2的方程，A和C都是二次方程。",
        difficulty=3,
        score=8,
        tags=["代数", "二次方程"],
    ),
    Question(
        id="3",
        topic_id="3",
        type=QuestionType.FILL,
        content="一个三角形的三个内角分别是60°、70°和____°。",
        answer="50",
        analysis="三角形内角和为180°，所以第三个角为180° - 60° - 70° = 50°。",
        difficulty=1,
        score=4,
        tags=["几何", "三角形"],
    ),
    Question(
        id="4",
        topic_id="3",
        type=QuestionType.SUBJECTIVE,
        content="请简述勾股定理的内容，并给出一个应用实例。",
        answer="勾股定理：在直角三角形中，两条直角边的平方和等于斜边的平方。即a² + b² = c²，其中c为斜边。",
        analysis="勾股定理是几何学中的基本定理，应用广泛。",
        difficulty=3,
        score=10,
        tags=["几何", "勾股定理"],
    ),
]

DEMO_USERS = [
    ("u-admin", "admin", "admin@example.com", Role.ADMIN),
    ("u-teacher", "teacher", "teacher@example.com", Role.TEACHER),
    ("u-student", "student", "student@example.com", Role.STUDENT),
]


def seed_demo_data(store: Store) -> None:
    """비어 있는 컬렉션만 채운다 (기존 데이터는 건드리지 않음)."""
    with store.lock:
        seeded = False
        if not store.users:
            password_hash = hash_password(config.DEFAULT_PASSWORD)
            for uid, username, email, role in DEMO_USERS:
                store.users[uid] = User(
                    id=uid, username=username, email=email, role=role, password_hash=password_hash
                )
            logger.info(f"데모 계정 생성: admin/teacher/student (비밀번호 {config.DEFAULT_PASSWORD})")
            seeded = True
        if not store.topics and not store.questions:
            store.topics.update({t.id: t.model_copy() for t in SAMPLE_TOPICS})
            store.questions.update({q.id: q.model_copy(deep=True) for q in SAMPLE_QUESTIONS})
            logger.info(f"데모 문제은행 생성: 토픽 {len(SAMPLE_TOPICS)}개, 문제 {len(SAMPLE_QUESTIONS)}개")
            seeded = True
        if seeded:
            store.save()
