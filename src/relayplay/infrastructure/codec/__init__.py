from .advisor import CapabilityProbe, detect_codec_support, get_extension

__all__ = ["CapabilityProbe", "detect_codec_support", "get_extension"]
