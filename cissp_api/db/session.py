from sqlmodel import SQLModel, Session, create_engine
from cissp_api.utils.config import settings

# Models must be imported so SQLModel registers their tables
from cissp_api.models.user import User
from cissp_api.models.subscription import Subscription, Payment
from cissp_api.models.study_class import StudyClass
from cissp_api.models.deck import Deck
from cissp_api.models.flashcard import Flashcard
from cissp_api.models.topic import Topic, SubTopic
from cissp_api.models.quiz_question import QuizQuestion, DeckQuizQuestion
from cissp_api.models.progress import UserCardProgress, StudySession, SessionCard, UserStats
from cissp_api.models.quiz_session import QuizSession, QuizSessionAnswer, UserQuizProgress, DeckQuizProgress
from cissp_api.models.bookmark import BookmarkedFlashcard
from cissp_api.models.feedback import UserFeedback
from cissp_api.models.ai_generation import (
    AiModelConfiguration,
    AiQuizGenerationLog,
    AdminAiQuotaConfig,
    AdminAiDailyUsage,
)

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, echo=False)


def init_db():
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
