"""Entry point delegating to the semantic sorter glue pipeline CLI."""

from semsort.glue.pipeline import main as pipeline_main


def main() -> None:
    pipeline_main()


if __name__ == "__main__":
    main()
