import numpy as np
import pytest

from rocketfx.scene import CommandBuffer


@pytest.fixture
def sink():
    return CommandBuffer()


@pytest.fixture
def make_hand():
    """Synthetic 21-point hand with a chosen number of curled fingers."""

    def _make_hand(closed_fingers=0, wrist=(0.5, 0.8, 0.0)):
        hand = np.full((21, 3), 0.5)
        hand[:, 2] = 0.0
        hand[0] = wrist
        hand[5] = (0.45, 0.6, -0.02)    # index base
        hand[17] = (0.6, 0.62, 0.01)    # pinky base
        for knuckle in (6, 10, 14, 18):
            hand[knuckle, 1] = 0.45
        for i, tip in enumerate((8, 12, 16, 20)):
            hand[tip, 1] = 0.55 if i < closed_fingers else 0.3
        return hand

    return _make_hand


@pytest.fixture
def make_pose():
    """Synthetic 33-point pose with wrists placed in normalized image coords."""

    def _make_pose(right_wrist=(0.5, 0.5), left_wrist=(0.5, 0.5)):
        pose = np.full((33, 3), 0.5)
        pose[:, 2] = 0.0
        pose[16, :2] = right_wrist
        pose[15, :2] = left_wrist
        return pose

    return _make_pose
