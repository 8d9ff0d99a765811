import base64
from types import SimpleNamespace

from settings import Provider, Settings

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"
DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()


class FakeGeminiModel:
    def __init__(self, model_name, reply):
        self.model_name = model_name
        self.reply = reply
        self.calls = []

    def generate_content(self, contents, generation_config=None, request_options=None):
        self.calls.append({
            "contents": contents,
            "generation_config": generation_config,
            "request_options": request_options,
        })
        if isinstance(self.reply, Exception):
            raise self.reply
        return SimpleNamespace(text=self.reply, candidates=[])


class FakeGenAI:
    """Stands in for the google.generativeai module."""

    def __init__(self, reply=""):
        self.reply = reply
        self.api_key = None
        self.models = []
        self.types = SimpleNamespace(GenerationConfig=lambda **kw: kw)

    def configure(self, api_key=None):
        self.api_key = api_key

    def GenerativeModel(self, model_name):
        model = FakeGeminiModel(model_name, self.reply)
        self.models.append(model)
        return model


class FakeOpenAI:
    """Stands in for openai.OpenAI; every instance shares `reply` and `calls`."""

    reply = ""
    calls = []

    def __init__(self, api_key=None, **kwargs):
        self.api_key = api_key
        self.options = kwargs
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        FakeOpenAI.calls.append(kwargs)
        if isinstance(FakeOpenAI.reply, Exception):
            raise FakeOpenAI.reply
        message = SimpleNamespace(content=FakeOpenAI.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def make_settings(**overrides):
    base = dict(
        provider=Provider.GEMINI,
        google_api_key="g-test",
        openai_api_key="o-test",
    )
    base.update(overrides)
    return Settings(**base)
