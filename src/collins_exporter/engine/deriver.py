"""
Turns asset records into metric observations.

Per asset: one status series per known Collins status (value 1 for
the asset's current one, 0 for the rest), one state series, one
constant details series carrying descriptive labels.
"""

from __future__ import annotations

from typing import Iterable, List

from collins_exporter.metrics import (
    ASSET_DETAILS,
    ASSET_STATE,
    ASSET_STATUS,
    AssetRecord,
    AssetStatus,
    Observation,
)


def derive_observations(asset: AssetRecord) -> List[Observation]:
    observations = []

    for status in AssetStatus:
        observations.append(Observation(
            desc=ASSET_STATUS,
            labels={"tag": asset.tag, "status": status.value},
            value=1.0 if asset.status == status.value else 0.0,
        ))

    observations.append(Observation(
        desc=ASSET_STATE,
        labels={"tag": asset.tag},
        value=float(asset.state),
    ))

    observations.append(Observation(
        desc=ASSET_DETAILS,
        labels={
            "tag": asset.tag,
            "nodeclass": asset.nodeclass,
            "ipmi_address": asset.ipmi_address,
            "primary_address": asset.primary_address,
        },
        value=1.0,
    ))

    return observations


def derive_all(assets: Iterable[AssetRecord]) -> List[Observation]:
    observations = []
    for asset in assets:
        observations.extend(derive_observations(asset))
    return observations
