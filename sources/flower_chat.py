"""flower_chat.py

"Ask the flower": one chat-completion request that turns the current
reading into a short, joking status line written as if by the plant.

Typical usage
-------------
>>> chat = FlowerChat(token="hf_...")
>>> chat.ask("Фикус", reading)
'Пить хочу, а так всё отлично!'

Failures never raise: the returned text describes what went wrong, the
same way the answer would have been shown.
"""

from typing import Any, Dict

import requests

import config
from models import Reading
from app_logger import logger

PROMPT_TEMPLATE = (
    "Ответь, как можно короче, пожалуйста(не более 15 слов). "
    "Если цветку все хорошо, обратившись к пользователю от имени цветка {name} "
    "без обращения к нему, от имени цветка, не предлагай варианты с изменением "
    "местоположения цветка, а только к его состоянию: Что нужно цветку \"{name}\", "
    "который стоит в комнате при температуре {temp}°C, влажности воздуха {humidity}%, "
    "освещенности {light}% и влажности почвы {soil}%?; ответь непринужденно и шуточно."
)


class FlowerChat:
    """
    Thin client for an OpenAI-compatible ``/chat/completions`` endpoint.

    Parameters
    ----------
    api_url : str
        Endpoint URL.
    model : str
        Model identifier sent in the request body.
    token : str
        Bearer token.  With an empty token no request is made.
    timeout_s : float
        Request timeout in seconds.
    """

    def __init__(self, api_url: str = config.CHAT_API_URL,
                 model: str = config.CHAT_MODEL,
                 token: str = config.CHAT_API_TOKEN,
                 timeout_s: float = config.CHAT_TIMEOUT_S):
        self.api_url = api_url
        self.model = model
        self.token = token
        self.timeout_s = timeout_s

    @staticmethod
    def build_prompt(flower_name: str, reading: Reading) -> str:
        return PROMPT_TEMPLATE.format(
            name=flower_name,
            temp=int(reading.temperature),
            humidity=int(reading.humidity),
            light=int(reading.light_level),
            soil=int(reading.soil_moisture),
        )

    def build_body(self, flower_name: str, reading: Reading) -> Dict[str, Any]:
        return {
            "stream": False,
            "model": self.model,
            "messages": [
                {"role": "user", "content": self.build_prompt(flower_name, reading)},
            ],
        }

    def ask(self, flower_name: str, reading: Reading) -> str:
        if not self.token:
            logger.warning("chat token not configured, set CHAT_API_TOKEN")
            return "Нет токена для чата"

        try:
            response = requests.post(
                self.api_url,
                json=self.build_body(flower_name, reading),
                headers={"Authorization": f"Bearer {self.token}"},
                timeout=self.timeout_s,
            )
        except requests.RequestException as exc:
            logger.warning("chat request failed: %s", exc)
            return f"Ошибка: {exc}"

        if not 200 <= response.status_code < 300:
            logger.warning("chat request returned HTTP %d", response.status_code)
            return f"Ошибка HTTP: {response.status_code}"

        try:
            choices = response.json()["choices"]
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("cannot decode chat response: %s", exc)
            return f"Ошибка декодирования: {exc}"

        if not choices:
            return "Нет сообщений в ответе."
        try:
            return choices[0]["message"]["content"]
        except (KeyError, TypeError) as exc:
            logger.warning("cannot decode chat response: %s", exc)
            return f"Ошибка декодирования: {exc}"
