from .run import DecodeRunResult, decode_from_config

__all__ = ["DecodeRunResult", "decode_from_config"]
