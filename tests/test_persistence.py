"""Tests for artifact persistence."""

import stat

import joblib
import pandas as pd
import pytest

from grocery_forecast import persistence
from grocery_forecast.modelset import fit_modelset
from grocery_forecast.persistence import artifact_path, load_objects, save_objects


class TestArtifactPath:
    """Tests for artifact locations."""

    def test_layout(self, tmp_path):
        path = artifact_path('grocery_sales', 'model_basic.joblib', tmp_path)
        assert path == tmp_path / 'grocery_sales' / 'model_basic.joblib'


class TestSaveLoad:
    """Tests for save_objects / load_objects."""

    def test_round_trip(self, tmp_path, train_df, test_df):
        save_objects({'oj_train': [train_df], 'oj_test': [test_df]}, 'grocery_sales', 'data.joblib', tmp_path)

        objects = load_objects('grocery_sales', 'data.joblib', tmp_path)

        assert set(objects) == {'oj_train', 'oj_test'}
        pd.testing.assert_frame_equal(objects['oj_train'][0], train_df)
        pd.testing.assert_frame_equal(objects['oj_test'][0], test_df)

    def test_modelset_round_trip(self, tmp_path, train_df, test_df, fixed_models):
        """Test that a loaded model set still forecasts."""
        modelset = fit_modelset(train_df, fixed_models)
        save_objects({'oj_modelset_basic': [modelset]}, 'grocery_sales', 'model_basic.joblib', tmp_path)

        loaded = load_objects('grocery_sales', 'model_basic.joblib', tmp_path)['oj_modelset_basic'][0]

        assert loaded.groups == modelset.groups
        original = modelset.get((1, 1), 'drift').forecast_periods([13, 14])
        restored = loaded.get((1, 1), 'drift').forecast_periods([13, 14])
        assert list(restored) == pytest.approx(list(original))

    def test_overwrite_replaces_artifact(self, tmp_path):
        save_objects({'a': 1}, 'grocery_sales', 'x.joblib', tmp_path)
        save_objects({'b': 2}, 'grocery_sales', 'x.joblib', tmp_path)

        assert load_objects('grocery_sales', 'x.joblib', tmp_path) == {'b': 2}

    def test_artifact_is_readable_by_others(self, tmp_path):
        """Test that the saved artifact does not keep the owner-only temp file mode."""
        path = save_objects({'a': 1}, 'grocery_sales', 'x.joblib', tmp_path)

        assert stat.S_IMODE(path.stat().st_mode) == 0o644

    def test_no_temporary_files_left(self, tmp_path):
        save_objects({'a': 1}, 'grocery_sales', 'x.joblib', tmp_path)

        assert [p.name for p in (tmp_path / 'grocery_sales').iterdir()] == ['x.joblib']

    def test_failed_save_keeps_previous_artifact(self, tmp_path, monkeypatch):
        save_objects({'a': 1}, 'grocery_sales', 'x.joblib', tmp_path)

        def failing_dump(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(persistence.joblib, 'dump', failing_dump)
        with pytest.raises(OSError, match="disk full"):
            save_objects({'a': 2}, 'grocery_sales', 'x.joblib', tmp_path)
        monkeypatch.undo()

        assert load_objects('grocery_sales', 'x.joblib', tmp_path) == {'a': 1}
        assert len(list((tmp_path / 'grocery_sales').iterdir())) == 1

    def test_empty_save_raises(self, tmp_path):
        with pytest.raises(ValueError, match="nothing to save"):
            save_objects({}, 'grocery_sales', 'x.joblib', tmp_path)

    def test_missing_artifact_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Artifact not found"):
            load_objects('grocery_sales', 'model_basic.joblib', tmp_path)

    def test_unnamed_artifact_raises(self, tmp_path):
        path = artifact_path('grocery_sales', 'x.joblib', tmp_path)
        path.parent.mkdir(parents=True)
        joblib.dump([1, 2, 3], path)

        with pytest.raises(ValueError, match="named objects"):
            load_objects('grocery_sales', 'x.joblib', tmp_path)
