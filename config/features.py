"""sim_logger Feature Flags

Flags decide trigger policy around the core; they never change the
document format or the checksum.
"""

import os

# =============================================================================
# FEATURE FLAGS
# =============================================================================

# Keep only every TICK_COUNT-th telemetry tick
FEATURE_TICK_DECIMATION = True

# Write a log when the host shuts down cleanly / loses the simulator
FEATURE_AUTOSAVE_ON_QUIT = True
FEATURE_AUTOSAVE_ON_CRASH = True

# The landing signal is advisory; off unless someone opts in
FEATURE_AUTOSAVE_ON_LANDING = False

# Look for the thermal descriptions file when composing
FEATURE_THERMAL_FILE_CHECK = True

_DEFAULTS = {
    "FEATURE_TICK_DECIMATION": True,
    "FEATURE_AUTOSAVE_ON_QUIT": True,
    "FEATURE_AUTOSAVE_ON_CRASH": True,
    "FEATURE_AUTOSAVE_ON_LANDING": False,
    "FEATURE_THERMAL_FILE_CHECK": True,
}


def is_feature_enabled(feature_name: str) -> bool:
    """Check if a feature is enabled.

    Supports environment variable override: SIM_LOGGER_{FEATURE_NAME}=1

    Args:
        feature_name: Name of the feature flag

    Returns:
        True if enabled, False otherwise
    """
    env_var = f"SIM_LOGGER_{feature_name.upper()}"
    env_value = os.environ.get(env_var)
    if env_value is not None:
        return env_value.lower() in ("1", "true", "yes", "on")

    return globals().get(feature_name, False)


def enable_feature(feature_name: str):
    """Enable a feature flag at runtime."""
    if feature_name in _DEFAULTS:
        globals()[feature_name] = True


def disable_feature(feature_name: str):
    """Disable a feature flag at runtime."""
    if feature_name in _DEFAULTS:
        globals()[feature_name] = False


def reset_features():
    """Restore every flag to its shipped default (for testing)."""
    for name, value in _DEFAULTS.items():
        globals()[name] = value


def get_all_features() -> dict:
    """Get all feature flags and their current state.

    Returns:
        Dict of feature_name -> enabled
    """
    return {name: is_feature_enabled(name) for name in _DEFAULTS}
