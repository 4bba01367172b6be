from .loop import GenerationLoop, LoopConfig

__all__ = ["GenerationLoop", "LoopConfig"]
