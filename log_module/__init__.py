"""
ISC License

Copyright (c) 2023 Eric Chickering <eric.chickering@gmail.com>

Permission to use, copy, modify, and/or distribute this software for any
purpose with or without fee is hereby granted, provided that the above
copyright notice and this permission notice appear in all copies.

THE SOFTWARE IS PROVIDED "AS IS" AND THE AUTHOR DISCLAIMS ALL WARRANTIES
WITH REGARD TO THIS SOFTWARE INCLUDING ALL IMPLIED WARRANTIES OF
MERCHANTABILITY AND FITNESS. IN NO EVENT SHALL THE AUTHOR BE LIABLE FOR
ANY SPECIAL, DIRECT, INDIRECT, OR CONSEQUENTIAL DAMAGES OR ANY DAMAGES
WHATSOEVER RESULTING FROM LOSS OF USE, DATA OR PROFITS, WHETHER IN AN ACTION
OF CONTRACT, NEGLIGENCE OR OTHER TORTIOUS ACTION, ARISING OUT OF OR IN
CONNECTION WITH THE USE OR PERFORMANCE OF THIS SOFTWARE.

"""
import logging
import os
import time
from logging.handlers import TimedRotatingFileHandler

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

_installed_handlers = []


def setup_logging(log_file='debug-log.txt', console_level=logging.INFO):
    logger = logging.getLogger('')
    logger.setLevel(logging.DEBUG)

    # Re-running setup replaces the handlers installed by the previous call
    while _installed_handlers:
        old_handler = _installed_handlers.pop()
        logger.removeHandler(old_handler)
        old_handler.close()

    handler = TimedRotatingFileHandler(log_file, utc=True, when="midnight", interval=1, backupCount=1)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    _installed_handlers.extend([handler, console_handler])
    return logger


class RunLogger:
    def __init__(self, log_file='debug-log.txt'):
        self.log_file = log_file

    def mark_start_of_run_in_log(self):
        if os.path.exists(self.log_file):
            position = os.path.getsize(self.log_file)
        else:
            position = 0

        with open(self.log_file, 'a') as file:
            start_marker = f"\n===== Ingestion Run Start: {time.ctime()} =====\n"
            file.write(start_marker)
        return position

    def warnings_and_errors_since(self, start_position):
        lines = []
        try:
            with open(self.log_file, 'r') as file:
                file.seek(start_position)  # Jump to the start of the current run
                for line in file:
                    if " - WARNING - " in line or " - ERROR - " in line or " - CRITICAL - " in line:
                        lines.append(line.strip())
        except FileNotFoundError:
            pass
        return lines

    def cleanup_old_logs(self, max_age_seconds=24 * 60 * 60):
        if not os.path.exists(self.log_file):
            return

        with open(self.log_file, 'r') as file:
            lines = file.readlines()

        cutoff = time.time() - max_age_seconds
        with open(self.log_file, 'w') as file:
            for line in lines:
                parts = line.split()
                if len(parts) < 2:
                    continue  # Skip lines that don't have enough parts

                try:
                    timestamp = time.strptime(parts[0] + ' ' + parts[1].split(',')[0], '%Y-%m-%d %H:%M:%S')
                except ValueError:
                    continue  # Skip lines where the timestamp can't be parsed

                if time.mktime(timestamp) > cutoff:
                    file.write(line)
