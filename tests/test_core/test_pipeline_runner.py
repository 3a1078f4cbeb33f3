"""Tests for core pipeline runner and contracts."""

from pathlib import Path

import pytest
import yaml

from rigidexport.core.contracts import PipelineConfig, StepEntry, StepMeta
from rigidexport.core.pipeline_runner import load_pipeline_config, import_step_class, load_step_config


class TestContracts:
    def test_step_meta(self):
        meta = StepMeta(step_name="test", elapsed_seconds=1.5, params={"a": 1})
        assert meta.step_name == "test"
        assert meta.elapsed_seconds == 1.5

    def test_pipeline_config(self):
        cfg = PipelineConfig(
            project_name="test",
            data_root=Path("./data"),
            steps=[StepEntry(name="s1", module="rigidexport.steps.s01_obj_export", config_file="c.yaml")],
        )
        assert len(cfg.steps) == 1
        assert cfg.steps[0].enabled is True
        assert cfg.steps[0].inputs == {}


class TestPipelineRunner:
    def test_load_pipeline_config(self, tmp_path: Path):
        config = {
            "project_name": "test_project",
            "data_root": str(tmp_path / "data"),
            "steps": [
                {"name": "obj_export", "module": "rigidexport.steps.s01_obj_export",
                 "config_file": "configs/steps/s01_obj_export.yaml", "depends_on": [], "enabled": True},
            ],
        }
        config_file = tmp_path / "pipeline.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config, f)

        cfg = load_pipeline_config(config_file)
        assert cfg.project_name == "test_project"
        assert len(cfg.steps) == 1

    def test_import_step_class(self):
        cls = import_step_class("rigidexport.steps.s01_obj_export")
        assert cls.__name__ == "ObjExportStep"
        assert hasattr(cls, "input_type")
        assert hasattr(cls, "output_type")

    def test_import_all_steps(self):
        modules = [
            "rigidexport.steps.s00_inspect_model",
            "rigidexport.steps.s01_obj_export",
        ]
        for module in modules:
            cls = import_step_class(module)
            assert cls.name, f"{module} has empty name"
            schema = cls.get_input_schema()
            assert "source_path" in schema["properties"]

    def test_import_missing_module(self):
        with pytest.raises(ImportError):
            import_step_class("rigidexport.steps.does_not_exist")

    def test_load_step_config(self, tmp_path: Path):
        from rigidexport.steps.s01_obj_export.config import ObjExportConfig

        config_data = {"blur_radius": 2, "height_strength": 0.5}
        config_file = tmp_path / "s01.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        cfg = load_step_config(config_file, ObjExportConfig)
        assert cfg.blur_radius == 2
        assert cfg.height_strength == 0.5

    def test_empty_step_config_uses_defaults(self, tmp_path: Path):
        from rigidexport.steps.s01_obj_export.config import ObjExportConfig

        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        cfg = load_step_config(config_file, ObjExportConfig)
        assert cfg.blur_radius == 0
        assert cfg.normalize_images is True

    def test_repo_pipeline_config_parses(self):
        repo_config = Path(__file__).resolve().parents[2] / "configs" / "pipeline.yaml"
        cfg = load_pipeline_config(repo_config)
        assert [s.name for s in cfg.steps] == ["inspect_model", "obj_export"]
        assert cfg.steps[1].depends_on == ["inspect_model"]
