"""Entry point for `python -m mic_transcribe`."""

from .app import main

if __name__ == "__main__":
    main()
