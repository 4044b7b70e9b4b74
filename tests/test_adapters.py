"""
Tests for the outbound adapters (wa.me link, Twilio WhatsApp, OpenAI descriptions).
"""
from types import SimpleNamespace

import openai
import pytest
from twilio.base.exceptions import TwilioRestException

from cardapio.adapters import openai_description
from cardapio.adapters.openai_description import FAILED, UNAVAILABLE, OpenAIDescriptionAdapter
from cardapio.adapters.twilio_whatsapp import TwilioWhatsAppChannel
from cardapio.adapters.wame_link import WaMeLinkChannel
from cardapio.infra.settings import settings
from cardapio.ports.order_channel import OrderChannelError


class FakeMessages:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def create(self, **kwargs):
        if self.error:
            raise self.error
        self.calls.append(kwargs)
        return SimpleNamespace(sid="SM123")


class TestWaMeLink:

    def test_returns_deep_link(self, shop):
        ref = WaMeLinkChannel().send(shop, "1x Pizza")
        assert ref == "https://wa.me/5511988887777?text=1x%20Pizza"


class TestTwilioWhatsApp:

    def test_sends_to_restaurant_number(self, shop):
        client = SimpleNamespace(messages=FakeMessages())
        channel = TwilioWhatsAppChannel(client=client, from_number="+1 415 555 0100")

        assert channel.send(shop, "pedido") == "SM123"
        assert client.messages.calls == [{
            "from_": "whatsapp:+14155550100",
            "to": "whatsapp:+5511988887777",
            "body": "pedido",
        }]

    def test_missing_sender(self, shop, monkeypatch):
        monkeypatch.setattr(settings, "TWILIO_WHATSAPP_FROM", "")
        channel = TwilioWhatsAppChannel(client=SimpleNamespace(messages=FakeMessages()))
        with pytest.raises(OrderChannelError):
            channel.send(shop, "pedido")

    def test_rest_error_is_wrapped(self, shop):
        err = TwilioRestException(400, "https://api.twilio.com", msg="número inválido")
        channel = TwilioWhatsAppChannel(client=SimpleNamespace(messages=FakeMessages(err)), from_number="+1")
        with pytest.raises(OrderChannelError, match="número inválido"):
            channel.send(shop, "pedido")


def fake_openai(create):
    """Módulo `openai` falso: só o que o adaptador usa."""
    return SimpleNamespace(
        api_key=None,
        OpenAIError=openai.OpenAIError,
        chat=SimpleNamespace(completions=SimpleNamespace(create=create)),
    )


class TestOpenAIDescription:

    def test_disabled_without_key(self, monkeypatch):
        monkeypatch.setattr(settings, "OPENAI_API_KEY", "")
        assert OpenAIDescriptionAdapter().generate("Coxinha") == UNAVAILABLE

    def test_truncates_long_text(self, monkeypatch):
        monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")
        reply = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="x" * 300))])
        fake = fake_openai(lambda **kw: reply)
        monkeypatch.setattr(openai_description, "openai", fake)

        text = OpenAIDescriptionAdapter().generate("Coxinha")

        assert fake.api_key == "sk-test"
        assert len(text) == 200
        assert text.endswith("...")

    def test_api_error_falls_back(self, monkeypatch):
        monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")

        def boom(**kw):
            raise openai.OpenAIError("quota")

        monkeypatch.setattr(openai_description, "openai", fake_openai(boom))
        assert OpenAIDescriptionAdapter().generate("Coxinha") == FAILED
