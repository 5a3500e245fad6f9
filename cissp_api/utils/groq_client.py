from groq import Groq

from cissp_api.utils.config import settings

client = Groq(api_key=settings.GROQ_API_KEY)


def get_ai_client() -> Groq:
    return client
