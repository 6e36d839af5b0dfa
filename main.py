from ukmod_receipt.pipeline import PipelineRunner


def main() -> None:
    """Run the full UKMOD UC-receipt tuning pipeline."""
    runner = PipelineRunner("config/default.yaml")
    runner.run()


if __name__ == "__main__":
    main()
