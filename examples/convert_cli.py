from __future__ import annotations

import os

from pinyin_converter import PinyinConverter, Position, SettingsStore, TextBuffer
from pinyin_converter.notices import LoggingNotifier
from pinyin_converter.utils.logger import setup_logger


def main():
    logger = setup_logger()
    settings = SettingsStore(os.getenv("PINYIN_SETTINGS_PATH", "pinyin_settings.json")).load()
    converter = PinyinConverter(settings, notifier=LoggingNotifier(logger))
    buffer = TextBuffer()
    print("Pinyin converter ready. Type a line to convert, /show to print the note, /quit to exit.")
    print("  zhe ge function shi x de pingfang")

    while True:
        user_input = input("pinyin> ").rstrip("\n")
        if user_input.strip().lower() in {"/quit", "quit", "exit"}:
            break
        if user_input.strip() == "/show":
            print(buffer.get_value())
            continue

        # append as a new line and convert it in place, so earlier lines act as context
        if buffer.get_value():
            last = buffer.line_count() - 1
            buffer.replace_range("\n" + user_input, Position(last, len(buffer.get_line(last))))
        else:
            buffer.replace_range(user_input, Position(0, 0))
        line = buffer.line_count() - 1
        buffer.set_cursor(Position(line, 0))

        converter.convert(buffer)
        print("note>", buffer.get_line(line))


if __name__ == "__main__":
    main()
