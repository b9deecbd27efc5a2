"""Audio input device enumeration and listing."""

import logging

from .capture import is_stereo_mix

logger = logging.getLogger(__name__)


def list_devices():
    """List all available input devices (for --device N)."""
    print("\n" + "=" * 65)
    print("MICROPHONE DEVICES (for --device N)")
    print("=" * 65)

    try:
        import pyaudio
    except ImportError:
        print("  (pyaudio not installed)")
        print("\n💡 Install audio support:")
        print("   pip install 'mic-transcribe[audio]'")
        return

    p = pyaudio.PyAudio()
    try:
        default_index = None
        try:
            default_index = p.get_default_input_device_info()["index"]
        except OSError:
            logger.debug("No default input device")

        for i in range(p.get_device_count()):
            info = p.get_device_info_by_index(i)
            if info["maxInputChannels"] > 0:
                name = info["name"]
                rate = int(info["defaultSampleRate"])
                marker = " ★ DEFAULT" if i == default_index else ""
                if is_stereo_mix(name):
                    marker += " ★ STEREO MIX"
                print(f"  [{i:2d}] {name} ({rate}Hz){marker}")
    finally:
        p.terminate()


def get_default_microphone_info() -> dict | None:
    """Get default microphone device info, or None if unavailable."""
    try:
        import pyaudio
    except ImportError:
        return None

    p = pyaudio.PyAudio()
    try:
        return dict(p.get_default_input_device_info())
    except OSError:
        return None
    finally:
        p.terminate()
