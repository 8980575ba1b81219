"""
Contractsmith

Compiles a Solidity contract template into deployable ABI and bytecode.

Heavy imports are lazily loaded. For direct module access, import from
submodules:

    from contractsmith.compiler import CompilationPipeline
    from contractsmith.config import load_config
    from contractsmith.exceptions import ArtifactNotFoundError
"""

__version__ = "1.0.0"

# Lazy imports so that `import contractsmith` does not pull in FastAPI or solcx
def __getattr__(name):
    """Lazy module loading."""
    if name == 'CompilationPipeline':
        from .compiler import CompilationPipeline
        return CompilationPipeline
    elif name == 'handler':
        from .api.function import handler
        return handler
    elif name == 'load_config':
        from .config import load_config
        return load_config
    raise AttributeError(f"module 'contractsmith' has no attribute {name!r}")

__all__ = ['CompilationPipeline', 'handler', 'load_config']
