"""Tests for the device template catalog."""

import pytest

from sdprofile.models import ControllerKind, ProfileTemplates


@pytest.mark.unit
class TestProfileTemplates:
    """Test template lookup and geometry."""

    def test_catalog_ids_unique(self):
        ids = [template.id for template in ProfileTemplates.ALL]
        assert len(ids) == len(set(ids)) == 8

    def test_device_models_unique(self):
        models = [template.device_model for template in ProfileTemplates.ALL]
        assert len(models) == len(set(models))

    def test_get_by_id(self):
        template = ProfileTemplates.get("sdxl")
        assert template.label == "Stream Deck XL"
        assert template.key_count == 32

    def test_get_unknown_id(self):
        assert ProfileTemplates.get("nope") is None

    def test_get_by_device_model(self):
        assert ProfileTemplates.get_by_device_model("20GBD9901").id == "sdplus"

    @pytest.mark.parametrize("device_model", [None, "", "UNKNOWN"])
    def test_unknown_device_model_falls_back(self, device_model):
        assert ProfileTemplates.get_by_device_model(device_model).id == "sdplusxl"

    def test_templates_are_frozen(self):
        template = ProfileTemplates.get("mini")
        with pytest.raises(Exception):
            template.columns = 10

    def test_contains_key(self):
        template = ProfileTemplates.get("sd15")
        assert template.contains_key(4, 2)
        assert not template.contains_key(5, 0)
        assert not template.contains_key(0, 3)
        assert not template.contains_key(-1, 0)

    def test_encoder_rows(self):
        assert ProfileTemplates.get("sd15").encoder_rows == 0
        assert ProfileTemplates.get("sdplus").encoder_rows == 1
        assert ProfileTemplates.get("sdstudio").encoder_rows == 1
        assert ProfileTemplates.get("g100sd").encoder_rows == 2

    def test_contains_encoder(self):
        sdplus = ProfileTemplates.get("sdplus")
        assert sdplus.contains_encoder(3, 0)
        assert not sdplus.contains_encoder(4, 0)
        assert not sdplus.contains_encoder(0, 1)

        galleon = ProfileTemplates.get("g100sd")
        assert galleon.contains_encoder(1, 1)
        assert not galleon.contains_encoder(2, 0)

    def test_touch_strip_layouts(self):
        assert not ProfileTemplates.get("sdstudio").has_touch_strip
        assert ProfileTemplates.get("sdstudio").has_dial_slots
        assert ProfileTemplates.get("g100sd").is_touch_strip_above_keys
        assert not ProfileTemplates.get("g100sd").has_dial_slots
        assert ProfileTemplates.get("sdplusxl").touch_strip_columns == 6

    def test_controller_order(self):
        assert ProfileTemplates.get("neo").controller_order == (ControllerKind.KEYPAD, ControllerKind.NEO)
        assert ProfileTemplates.get("sdplus").controller_order[0] is ControllerKind.ENCODER
