import os
import sys
import asyncio
import argparse
import logging
import mimetypes
import time

from tqdm import tqdm

from config.settings import get_all_settings, get_store_config
from utils.logging_utils import setup_logging
from utils.performance import get_tracker
from utils.exceptions import PipelineError
from schemas.models import UploadMetadata
from services.storage_service import bootstrap_object_store
from services.text_service import StaticTextExtractor
from processing.pipeline import (
    PipelineOrchestrator,
    Stage,
    build_pipeline_services,
    describe_stage,
)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Convert a whiteboard photo into a PowerPoint deck and a PDF."
    )
    parser.add_argument("image_path", help="Path to the whiteboard image")
    text_group = parser.add_mutually_exclusive_group()
    text_group.add_argument("--text", help="Text to place on the slides")
    text_group.add_argument("--text-file", help="File containing the text to place on the slides")
    parser.add_argument("--title", help="Slide deck title")
    parser.add_argument(
        "--output-folder",
        default=None,
        help="Folder for run logs (defaults to ./output)",
    )
    return parser.parse_args(argv)


def _read_text(args: argparse.Namespace):
    if args.text_file:
        with open(args.text_file, "r", encoding="utf-8") as f:
            return f.read()
    return args.text


async def main_async(argv=None) -> int:
    """
    Main async function: bootstrap storage, run one conversion, report.
    """
    args = parse_args(argv)

    if not os.path.isfile(args.image_path):
        print(f"Error: Image file '{args.image_path}' does not exist.")
        return 1

    output_folder = args.output_folder or os.path.join(os.getcwd(), "output")
    run_id = time.strftime("%Y%m%d_%H%M%S")

    # 1) Set up logging
    setup_logging(output_folder, run_id)
    logging.info(f"Converting image: {args.image_path}")
    logging.info(f"Run ID: {run_id}")
    logging.info(f"Application settings: {get_all_settings()}")

    store = None
    try:
        # 2) Provision buckets once for this process
        store = await bootstrap_object_store(get_store_config())

        # 3) Wire the pipeline
        services = build_pipeline_services(store, StaticTextExtractor(_read_text(args)))
        orchestrator = PipelineOrchestrator(services)

        with open(args.image_path, "rb") as f:
            image_bytes = f.read()
        mime_type, _ = mimetypes.guess_type(args.image_path)
        metadata = UploadMetadata(
            mime_type=mime_type or "application/octet-stream",
            size_bytes=len(image_bytes),
            file_name=os.path.basename(args.image_path),
        )

        # 4) Run with a progress bar bound to the stage
        with tqdm(total=100, desc="Standby", leave=False) as pbar:
            def on_stage(stage: Stage) -> None:
                info = describe_stage(stage)
                pbar.set_description(info.title)
                pbar.n = info.progress
                pbar.refresh()

            orchestrator.stages.subscribe(on_stage)
            await orchestrator.run(image_bytes, metadata, title=args.title)

        result = orchestrator.result
        if result is None or result.stage is not Stage.COMPLETE:
            message = result.error if result else "Processing failed"
            logging.error(f"{message} ({result.detail if result else 'no result'})")
            print(message)
            return 1

        if result.degraded:
            logging.warning("Image could not be embedded; documents contain text only")
        print(f"Presentation: {result.presentation_url}")
        print(f"PDF: {result.pdf_url}")

        get_tracker().log_report()
        return 0
    except PipelineError as e:
        logging.error(f"Pipeline rejected the image: {e}")
        print(str(e))
        return 1
    except Exception as e:
        logging.error(f"Unhandled exception in main process: {str(e)}", exc_info=True)
        return 1
    finally:
        if store is not None:
            await store.close()


if __name__ == "__main__":
    try:
        exit_code = asyncio.run(main_async())
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nProcess interrupted by user")
        sys.exit(1)
    except Exception as e:
        print(f"Fatal error: {str(e)}")
        sys.exit(1)
