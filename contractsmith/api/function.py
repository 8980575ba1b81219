"""
Function-style entry point.

    handler(event, context) -> {"statusCode": int, "body": str}

The event is accepted for compatibility with function-hosting transports and
otherwise ignored: every invocation compiles the configured template. No
exception leaves the handler; faults outside the pipeline's own error results
come back as a structured failure body too.
"""

import json
from typing import Any, Optional

from ..compiler import CompilationPipeline, PipelineResult
from ..config import load_config
from ..exceptions import ContractsmithError
from ..logger import get_logger

logger = get_logger(__name__)

_pipeline: Optional[CompilationPipeline] = None


def get_pipeline() -> CompilationPipeline:
    """Pipeline built from the service configuration on first use."""
    global _pipeline
    if _pipeline is None:
        config = load_config()
        config.validate()
        _pipeline = CompilationPipeline.from_config(config)
    return _pipeline


def reset_pipeline() -> None:
    """Drop the cached pipeline so the next request reloads configuration."""
    global _pipeline
    _pipeline = None


def build_response(result: PipelineResult) -> dict:
    return {
        "statusCode": result.status_code,
        "body": json.dumps(result.to_body()),
    }


def handler(event: Any = None, context: Any = None, pipeline: Optional[CompilationPipeline] = None) -> dict:
    try:
        pipeline = pipeline or get_pipeline()
        logger.info(f"Compile request for {pipeline.template_name}:{pipeline.contract_name}")
        result = pipeline.run()
    except ContractsmithError as e:
        logger.error(f"Compile request failed before the pipeline ran: {e.kind}: {e.message}")
        result = PipelineResult(error=e)
    except Exception as e:
        logger.exception(f"Unhandled exception in compile handler: {e}")
        result = PipelineResult(error=ContractsmithError("Internal Server Error"))
    return build_response(result)
