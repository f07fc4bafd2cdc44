"""Device template catalog.

One immutable ProfileTemplate per supported Stream Deck model. Templates are
looked up by id or by the device model string found in archive manifests.
"""

import logging

from pydantic import BaseModel, ConfigDict, Field

from .enums import ControllerKind

logger = logging.getLogger(__name__)

# Reserved page id meaning "no specific current page"
ZERO_UUID = "00000000-0000-0000-0000-000000000000"

# Template used when a device model is not recognized
FALLBACK_TEMPLATE_ID = "sdplusxl"


class ProfileTemplate(BaseModel):
    """Capability descriptor for one device model."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Short template id (e.g. 'sdxl')")
    label: str = Field(description="Human readable device name")
    device_model: str = Field(description="Device model string stored in manifests")
    profile_root_name: str = Field(description="Canonical '.sdProfile' root folder name")
    default_page_id: str = Field(description="Landing page id used by the device software")
    working_page_id: str = Field(description="First editable page id of a new profile")
    columns: int = Field(ge=0, description="Key grid columns")
    rows: int = Field(ge=0, description="Key grid rows")
    dials: int = Field(default=0, ge=0, description="Number of encoder dials")
    controller_order: tuple[ControllerKind, ...] = Field(
        description="Controller order written into page manifests"
    )

    @property
    def key_count(self) -> int:
        return self.columns * self.rows

    # Layout descriptors. Studio has dials without a touch strip; the Galleon
    # has a two-row strip above the keys and no round dial slots.

    @property
    def has_touch_strip(self) -> bool:
        if self.id == "sdstudio":
            return False
        if self.id == "g100sd":
            return True
        return self.dials > 0

    @property
    def has_dial_slots(self) -> bool:
        if self.id == "g100sd":
            return False
        return self.dials > 0

    @property
    def is_touch_strip_above_keys(self) -> bool:
        return self.id == "g100sd"

    @property
    def touch_strip_rows(self) -> int:
        if not self.has_touch_strip:
            return 0
        return 2 if self.id == "g100sd" else 1

    @property
    def touch_strip_columns(self) -> int:
        if not self.has_touch_strip:
            return 0
        return 2 if self.id == "g100sd" else max(self.dials, 1)

    @property
    def encoder_rows(self) -> int:
        """Number of encoder coordinate rows an action may occupy."""
        if self.dials <= 0 and not self.has_touch_strip:
            return 0
        return max(1, self.touch_strip_rows)

    def encoder_column_for_touch_strip_cell(self, column: int, row: int) -> int:
        """Map a touch strip cell to the encoder column it controls."""
        if not self.has_touch_strip:
            return max(column, 0)
        return min(max(column, 0), max(self.dials - 1, 0))

    def encoder_row_for_touch_strip_cell(self, column: int, row: int) -> int:
        """Map a touch strip cell to its encoder row (Galleon: top=0, bottom=1)."""
        encoder_rows = max(self.encoder_rows, 1)
        if not self.has_touch_strip:
            return 0
        if self.id == "g100sd":
            return min(max(row, 0), encoder_rows - 1)
        return 0

    def contains_key(self, column: int, row: int) -> bool:
        return 0 <= column < self.columns and 0 <= row < self.rows

    def contains_encoder(self, column: int, row: int) -> bool:
        return 0 <= column < self.dials and 0 <= row < self.encoder_rows


class ProfileTemplates:
    """Static catalog of every supported device."""

    ALL: tuple[ProfileTemplate, ...] = (
        ProfileTemplate(
            id="mini",
            label="Stream Deck Mini",
            device_model="20GAI9902",
            profile_root_name="3987917B-DACD-477A-BABC-8EEC9D5D94F6.sdProfile",
            default_page_id="5e312b8f-eb08-4050-9d5f-3b76704c19bf",
            working_page_id="7b823eed-b407-4549-877b-ba71b61b90a0",
            columns=3, rows=2, dials=0,
            controller_order=(ControllerKind.KEYPAD,),
        ),
        ProfileTemplate(
            id="neo",
            label="Stream Deck Neo",
            device_model="20GBJ9901",
            profile_root_name="4B6D966C-8037-4CC2-8F2C-A3D0CE41053C.sdProfile",
            default_page_id="e8b3aee1-c58c-4092-b1b1-9bfb36bf18e0",
            working_page_id="1f2ee4e4-4496-4df0-8da3-8b564ad0df26",
            columns=4, rows=2, dials=0,
            controller_order=(ControllerKind.KEYPAD, ControllerKind.NEO),
        ),
        ProfileTemplate(
            id="sd15",
            label="Stream Deck",
            device_model="20GBL9901",
            profile_root_name="47BA4A1D-B876-4DEF-9AD7-1D966A64D341.sdProfile",
            default_page_id="eee1dbe5-2ab8-45df-96f5-80caa89b1ceb",
            working_page_id="99962573-27ce-4d35-96e6-f9d8b9e0451b",
            columns=5, rows=3, dials=0,
            controller_order=(ControllerKind.KEYPAD,),
        ),
        ProfileTemplate(
            id="sdxl",
            label="Stream Deck XL",
            device_model="20GAT9902",
            profile_root_name="673C3A5E-B30C-4AD5-B8B7-03BF1686E9F9.sdProfile",
            default_page_id="0d62177f-fa52-4dac-91bb-f4773d646ec9",
            working_page_id="6239c2c6-0ad6-47b9-9e1f-70c254ddc7e6",
            columns=8, rows=4, dials=0,
            controller_order=(ControllerKind.KEYPAD,),
        ),
        ProfileTemplate(
            id="sdplus",
            label="Stream Deck +",
            device_model="20GBD9901",
            profile_root_name="848EB342-A9D6-4388-BF1F-E9C53C9E7482.sdProfile",
            default_page_id="d90b6cf1-70eb-4737-b2e8-eb821666a8d0",
            working_page_id="502dc114-3541-49f4-9c29-6618ec59b8bc",
            columns=4, rows=2, dials=4,
            controller_order=(ControllerKind.ENCODER, ControllerKind.KEYPAD),
        ),
        ProfileTemplate(
            id="sdplusxl",
            label="Stream Deck + XL",
            device_model="20GBX9901",
            profile_root_name="AD21D867-BE2D-4B6B-B358-5A5E74CF7280.sdProfile",
            default_page_id="5c038231-2e92-45ea-a0a8-ba60e3799cf1",
            working_page_id="f2fcf47e-e496-49e3-9f78-6affc2f8ce87",
            columns=9, rows=4, dials=6,
            controller_order=(ControllerKind.KEYPAD, ControllerKind.ENCODER),
        ),
        ProfileTemplate(
            id="sdstudio",
            label="Stream Deck Studio",
            device_model="20GBO9901",
            profile_root_name="E837C4E1-6260-463E-95F9-D5974BB675FD.sdProfile",
            default_page_id="890e7c01-8ca0-432e-a213-6372d4baed9a",
            working_page_id="b888f2f4-8bf0-424a-acd6-fb5e3fb5a307",
            columns=16, rows=2, dials=2,
            controller_order=(ControllerKind.ENCODER, ControllerKind.KEYPAD),
        ),
        ProfileTemplate(
            id="g100sd",
            label="Galleon 100 SD",
            device_model="GRETSCH",
            profile_root_name="89F30D12-7A76-4D0B-9462-65B815E812B9.sdProfile",
            default_page_id="f8832b67-cd24-449d-9000-b17c1dac0e73",
            working_page_id="b13a1727-8271-4408-85c7-c94b61861b0f",
            columns=3, rows=4, dials=2,
            controller_order=(ControllerKind.ENCODER, ControllerKind.KEYPAD),
        ),
    )

    BY_ID: dict[str, ProfileTemplate] = {t.id: t for t in ALL}
    BY_DEVICE_MODEL: dict[str, ProfileTemplate] = {t.device_model: t for t in ALL}

    @classmethod
    def get(cls, template_id: str) -> ProfileTemplate | None:
        """Look up a template by id."""
        return cls.BY_ID.get(template_id)

    @classmethod
    def get_by_device_model(cls, device_model: str | None) -> ProfileTemplate:
        """
        Look up a template by manifest device model string.

        Unknown or missing models resolve to the richest template so that no
        action data is truncated on unrecognized hardware.
        """
        if device_model is not None and device_model in cls.BY_DEVICE_MODEL:
            return cls.BY_DEVICE_MODEL[device_model]
        logger.warning(f"Unknown device model {device_model!r}, using {FALLBACK_TEMPLATE_ID}")
        return cls.BY_ID[FALLBACK_TEMPLATE_ID]

    @classmethod
    def fallback(cls) -> ProfileTemplate:
        return cls.BY_ID[FALLBACK_TEMPLATE_ID]
