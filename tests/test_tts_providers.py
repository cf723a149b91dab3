"""Tests for the Google and ElevenLabs adapters against a mocked transport."""

import base64
import json
import unittest

import httpx

from narrator.exceptions import TTSProviderError
from narrator.tts import (
    ElevenLabsProvider,
    GoogleProvider,
    TTSProviderName,
    get_provider,
)


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestGoogleProvider(unittest.IsolatedAsyncioTestCase):
    async def test_synthesize_sends_key_and_decodes_audio(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(
                200, json={"audioContent": base64.b64encode(b"ID3-mp3").decode()}
            )

        async with mock_client(handler) as client:
            provider = GoogleProvider(
                client=client,
                language_code="fr-FR",
                base_url="https://tts.example.com",
            )
            audio = await provider.synthesize("Bonjour.", "goog-key", "fr-FR-Neural2-A")

        self.assertEqual(audio, b"ID3-mp3")
        request = seen["request"]
        self.assertEqual(request.method, "POST")
        self.assertEqual(request.url.path, "/v1/text:synthesize")
        self.assertEqual(request.url.params["key"], "goog-key")

        body = json.loads(request.content)
        self.assertEqual(body["input"], {"text": "Bonjour."})
        self.assertEqual(body["voice"], {"languageCode": "fr-FR", "name": "fr-FR-Neural2-A"})
        self.assertEqual(body["audioConfig"]["audioEncoding"], "MP3")
        self.assertEqual(body["audioConfig"]["sampleRateHertz"], 44100)

    async def test_error_response_carries_status_and_payload(self):
        def handler(request):
            return httpx.Response(403, text='{"error": "API key not valid"}')

        async with mock_client(handler) as client:
            provider = GoogleProvider(client=client)
            with self.assertRaises(TTSProviderError) as ctx:
                await provider.synthesize("Bonjour.", "bad", "voice")

        error = ctx.exception
        self.assertEqual(error.provider, "google")
        self.assertEqual(error.status, 403)
        self.assertIn("API key not valid", error.payload)
        self.assertTrue(error.message.startswith("Google TTS API error"))
        self.assertEqual(error.status_code, 500)

    async def test_missing_audio_content(self):
        async with mock_client(lambda request: httpx.Response(200, json={})) as client:
            provider = GoogleProvider(client=client)
            with self.assertRaises(TTSProviderError) as ctx:
                await provider.synthesize("Bonjour.", "key", "voice")
        self.assertEqual(ctx.exception.message, "No audio content received from Google TTS")

    async def test_non_json_success_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>proxy page</html>")

        async with mock_client(handler) as client:
            provider = GoogleProvider(client=client)
            with self.assertRaises(TTSProviderError) as ctx:
                await provider.synthesize("Bonjour.", "key", "voice")
        self.assertEqual(ctx.exception.message, "Invalid response from Google TTS")
        self.assertEqual(ctx.exception.status, 200)
        self.assertIn("proxy page", ctx.exception.payload)

    async def test_timeout_is_mapped(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        async with mock_client(handler) as client:
            provider = GoogleProvider(client=client)
            with self.assertRaises(TTSProviderError) as ctx:
                await provider.synthesize("Bonjour.", "key", "voice")
        self.assertEqual(ctx.exception.message, "Google TTS request timed out")

    async def test_connection_error_is_mapped(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with mock_client(handler) as client:
            provider = GoogleProvider(client=client)
            with self.assertRaises(TTSProviderError) as ctx:
                await provider.synthesize("Bonjour.", "key", "voice")
        self.assertIn("request failed", ctx.exception.message)

    async def test_list_voices(self):
        def handler(request):
            self.assertEqual(request.url.path, "/v1/voices")
            self.assertEqual(request.url.params["key"], "k")
            return httpx.Response(200, json={"voices": [{"name": "fr-FR-Neural2-A"}]})

        async with mock_client(handler) as client:
            voices = await GoogleProvider(client=client).list_voices("k")
        self.assertEqual(voices, [{"name": "fr-FR-Neural2-A"}])


class TestElevenLabsProvider(unittest.IsolatedAsyncioTestCase):
    async def test_synthesize_uses_header_and_voice_path(self):
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(200, content=b"\xff\xfbmp3")

        async with mock_client(handler) as client:
            provider = ElevenLabsProvider(
                client=client, model_id="eleven_multilingual_v2"
            )
            audio = await provider.synthesize("Salut.", "xi-key", "voice123")

        self.assertEqual(audio, b"\xff\xfbmp3")
        request = seen["request"]
        self.assertEqual(request.url.path, "/v1/text-to-speech/voice123")
        self.assertEqual(request.headers["xi-api-key"], "xi-key")
        self.assertEqual(request.headers["accept"], "audio/mpeg")
        self.assertNotIn("key", request.url.params)

        body = json.loads(request.content)
        self.assertEqual(body["text"], "Salut.")
        self.assertEqual(body["model_id"], "eleven_multilingual_v2")
        self.assertEqual(body["voice_settings"]["stability"], 0.5)
        self.assertEqual(body["voice_settings"]["similarity_boost"], 0.75)

    async def test_error_response(self):
        async with mock_client(lambda r: httpx.Response(401, text="unauthorized")) as client:
            provider = ElevenLabsProvider(client=client)
            with self.assertRaises(TTSProviderError) as ctx:
                await provider.synthesize("Salut.", "bad", "voice123")
        self.assertEqual(ctx.exception.status, 401)
        self.assertEqual(ctx.exception.payload, "unauthorized")
        self.assertEqual(ctx.exception.message, "ElevenLabs TTS API error: unauthorized")

    async def test_empty_audio(self):
        async with mock_client(lambda r: httpx.Response(200, content=b"")) as client:
            provider = ElevenLabsProvider(client=client)
            with self.assertRaises(TTSProviderError) as ctx:
                await provider.synthesize("Salut.", "key", "voice123")
        self.assertEqual(ctx.exception.message, "Empty audio from ElevenLabs")

    async def test_missing_voice(self):
        provider = ElevenLabsProvider()
        with self.assertRaises(TTSProviderError):
            await provider.synthesize("Salut.", "key", "")


class TestRegistry(unittest.TestCase):
    def test_get_provider(self):
        self.assertIsInstance(get_provider("google"), GoogleProvider)
        self.assertIsInstance(get_provider(TTSProviderName.ELEVENLABS), ElevenLabsProvider)

    def test_chunk_ceilings(self):
        self.assertEqual(GoogleProvider.max_chunk_bytes, 4500)
        self.assertEqual(ElevenLabsProvider.max_chunk_bytes, 5000)

    def test_unknown_provider(self):
        with self.assertRaises(ValueError):
            get_provider("polly")


if __name__ == "__main__":
    unittest.main()
