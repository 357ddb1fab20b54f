"""
Unit tests for DependencyContainer.
"""

import asyncio

import pytest
import yaml
from conftest import FakeBackend
from pagesift.config import Config
from pagesift.container import DependencyContainer
from pagesift.pipeline import CleanPipeline


class TestConfig:
    def test_default_config(self):
        container = DependencyContainer()
        assert isinstance(container.config, Config)
        assert container.config is container.config

    def test_missing_file_falls_back_to_defaults(self, tmp_path):
        container = DependencyContainer(tmp_path / "missing.yaml")
        assert container.config.quality.min_score == 25

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "pagesift.yaml"
        path.write_text(yaml.safe_dump({"quality": {"min_score": 40}}))
        container = DependencyContainer(path)
        assert container.config.quality.min_score == 40


class TestComponents:
    def test_default_service_uses_configured_models(self):
        container = DependencyContainer()
        service = container.get_summarization_service()
        assert [d.name for d in service.descriptors] == container.config.summarization.models
        assert service.active_backend_name is None
        assert container.get_summarization_service() is service

    @pytest.mark.asyncio
    async def test_pipeline_built_once(self, nlp, test_config, make_service):
        container = DependencyContainer(
            config=test_config, nlp=nlp, summarization_service=make_service(FakeBackend())
        )

        first, second = await asyncio.gather(container.get_pipeline(), container.get_pipeline())
        assert isinstance(first, CleanPipeline)
        assert first is second
        assert await container.get_nlp() is nlp

    @pytest.mark.asyncio
    async def test_health_status(self, nlp, test_config, make_service):
        service = make_service(FakeBackend())
        container = DependencyContainer(config=test_config, nlp=nlp, summarization_service=service)
        assert container.get_health_status()["pipeline_ready"] is False

        await container.get_pipeline()
        await service.initialize()
        status = container.get_health_status()
        assert status == {
            "config_loaded": True,
            "nlp_loaded": True,
            "pipeline_ready": True,
            "summarization_backend": "fake",
        }
