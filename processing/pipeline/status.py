"""
User-facing descriptions of stages and failures.
"""
from processing.pipeline.types import FailureKind, Stage, StageInfo

_STAGE_INFO = {
    Stage.IDLE: StageInfo("Standby", "Ready to process your image", 0),
    Stage.UPLOADING: StageInfo("Uploading image...", "Please wait while we upload your image", 30),
    Stage.PROCESSING: StageInfo("Processing image...", "Analyzing and converting to slides", 70),
    Stage.COMPLETE: StageInfo("Processing complete!", "Your slides are ready to download", 100),
    Stage.ERROR: StageInfo("Processing failed", "There was an error processing your image", 100),
}

_FAILURE_SUMMARIES = {
    FailureKind.UPLOAD: "Could not upload the image. Please try again.",
    FailureKind.GENERATE: "Could not generate the slides. Please try again.",
    FailureKind.SAVE: "Could not save the slides. Please try again.",
}


def describe_stage(stage: Stage) -> StageInfo:
    return _STAGE_INFO[Stage(stage)]


def failure_summary(kind: FailureKind) -> str:
    return _FAILURE_SUMMARIES[FailureKind(kind)]
