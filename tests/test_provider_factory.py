"""
Tests for provider chains and the adapter factory.
"""
import pytest

from adgen import config
from adgen.gemini import GeminiImageAdapter, VeoVideoAdapter
from adgen.huggingface import HuggingFaceImageAdapter
from adgen.kie import KieVideoAdapter
from adgen.pipeline.models import CredentialBundle, MediaKind
from adgen.provider_factory import ProviderFactory, UnknownProviderError
from adgen.replicate import ReplicateVideoAdapter


class TestChains:
    """Chain parsing and validation."""

    def test_parse_chain(self):
        assert config.parse_chain(" Gemini, replicate,,gemini ,KIE") == ["gemini", "replicate", "kie"]
        assert config.parse_chain("") == []

    def test_default_chains(self):
        factory = ProviderFactory(chains={
            "image": config.parse_chain(config.DEFAULT_IMAGE_CHAIN),
            "video": config.parse_chain(config.DEFAULT_VIDEO_CHAIN),
        })

        assert factory.chain(MediaKind.IMAGE) == ["huggingface", "gemini", "replicate"]
        assert factory.chain(MediaKind.VIDEO) == ["gemini", "replicate", "kie"]

    def test_unknown_provider_rejected(self):
        with pytest.raises(UnknownProviderError):
            ProviderFactory(chains={"image": ["midjourney"]})

    def test_kind_mismatch_rejected(self):
        with pytest.raises(UnknownProviderError):
            ProviderFactory(chains={"image": ["kie"]})


class TestBuild:
    """Credential-gated adapter lists."""

    def test_all_credentials(self, all_credentials):
        factory = ProviderFactory(chains={"image": ["huggingface", "gemini"], "video": ["gemini", "replicate", "kie"]})

        images = factory.build(MediaKind.IMAGE, all_credentials)
        videos = factory.build(MediaKind.VIDEO, all_credentials)

        assert [type(a) for a in images] == [HuggingFaceImageAdapter, GeminiImageAdapter]
        assert [type(a) for a in videos] == [VeoVideoAdapter, ReplicateVideoAdapter, KieVideoAdapter]

    def test_missing_credentials_are_skipped(self):
        factory = ProviderFactory(chains={"video": ["gemini", "replicate", "kie"]})
        credentials = CredentialBundle(kie="kie-test-key", gemini="   ")

        adapters = factory.build(MediaKind.VIDEO, credentials)

        assert [a.name for a in adapters] == ["kie"]

    def test_no_credentials_gives_empty_chain(self):
        factory = ProviderFactory(chains={"image": ["huggingface", "replicate"]})
        assert factory.build(MediaKind.IMAGE, CredentialBundle()) == []

    def test_chain_order_is_configuration(self, all_credentials):
        factory = ProviderFactory(chains={"video": ["kie", "gemini"]})
        assert [a.name for a in factory.build(MediaKind.VIDEO, all_credentials)] == ["kie", "gemini"]

    def test_adapter_for(self, all_credentials):
        factory = ProviderFactory(chains={})

        assert isinstance(factory.adapter_for(MediaKind.VIDEO, "kie", all_credentials), KieVideoAdapter)
        assert factory.adapter_for(MediaKind.VIDEO, "kie", CredentialBundle()) is None
        with pytest.raises(UnknownProviderError):
            factory.adapter_for(MediaKind.VIDEO, "huggingface", all_credentials)


class TestCredentials:
    """Credential bundles and environment loading."""

    def test_secrets_are_masked(self, all_credentials):
        assert "hf_test_token" not in repr(all_credentials)
        assert "hf_test_token" not in str(all_credentials.for_provider("huggingface"))

    def test_merged_override_wins(self, all_credentials):
        merged = all_credentials.merged(CredentialBundle(kie="user-kie-key"))

        assert merged.kie.get_secret_value() == "user-kie-key"
        assert merged.gemini.get_secret_value() == "gemini-test-key"

    def test_unknown_provider_has_no_credential(self, all_credentials):
        assert all_credentials.for_provider("simulation") is None

    def test_credentials_from_env(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "")
        monkeypatch.setenv("GOOGLE_API_KEY", "google-key")
        monkeypatch.setenv("HF_TOKEN", "hf-key")
        monkeypatch.setenv("REPLICATE_API_TOKEN", "")

        bundle = config.credentials_from_env()

        assert bundle.configured() == ["gemini", "huggingface"]
        assert bundle.gemini.get_secret_value() == "google-key"
