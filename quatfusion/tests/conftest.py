"""Pytest fixtures for quaternion fusion tests."""

import sys
from pathlib import Path
import pytest
import numpy as np

root_dir = Path(__file__).parent.parent.parent
sys.path.insert(0, str(root_dir))

from quatfusion.core.config import Config
from quatfusion.core.types import ImuSample, Quaternion


@pytest.fixture
def config() -> Config:
    """Create default configuration for tests."""
    return Config()


@pytest.fixture
def level_sample() -> ImuSample:
    """Create a level, north-facing, stationary sample.

    Gravity along +Z and a compass field pointing north and down.
    """
    return ImuSample.create(
        timestamp=1_000_000,
        gyro=(0.0, 0.0, 0.0),
        accel=(0.0, 0.0, 1.0),
        compass=(0.4, 0.0, 0.3),
        compass_valid=True,
    )


@pytest.fixture
def tilted_sample() -> ImuSample:
    """Create a sample rolled by roughly 30 degrees."""
    roll = np.deg2rad(30)
    return ImuSample.create(
        timestamp=1_000_000,
        accel=(0.0, np.sin(roll), np.cos(roll)),
        compass=(0.4, 0.0, 0.3),
        compass_valid=False,
    )


@pytest.fixture
def identity_quaternion() -> Quaternion:
    """Create identity quaternion (no rotation)."""
    return Quaternion.identity()


@pytest.fixture
def sample_quaternion() -> Quaternion:
    """Create a sample non-identity quaternion.

    Represents approximately 30 degree rotation about Z axis.
    """
    angle = np.deg2rad(30)
    return Quaternion(
        w=np.cos(angle / 2),
        x=0.0,
        y=0.0,
        z=np.sin(angle / 2),
    )


@pytest.fixture
def sample_log(tmp_path) -> Path:
    """Write a short recorded log with a duplicate timestamp."""
    path = tmp_path / "run.csv"
    path.write_text(
        "# quatfusion sample log\n"
        "timestamp_us,gx,gy,gz,ax,ay,az,mx,my,mz,compass_valid\n"
        "0,0,0,0,0,0,1,0.4,0,0.3,1\n"
        "10000,0,0,0.1,0,0,1,0.4,0,0.3,1\n"
        "10000,0,0,0.1,0,0,1,0.4,0,0.3,1\n"
        "20000,0,0,0.1,0,0,1,0.4,0,0.3,0\n",
        encoding="utf-8",
    )
    return path
