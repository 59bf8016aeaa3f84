import logging
import os
import sys


# colors for the shell ---------------------------------------------------------
class bco:
    ResetAll = "\033[0m"
    Bold       = "\033[1m"
    Green        = "\033[32m"
    Red          = "\033[31m"
    Cyan         = "\033[36m"
    LightGreen   = "\033[92m"
    LightBlue    = "\033[94m"
    LightMagenta = "\033[95m"


def print_error():
    try:
        sys.stderr.write(f"\n{bco.Red}{bco.Bold}[E::main] Error: {bco.ResetAll}")
    except Exception:
        sys.stderr.write("[E::main] Error: ")


# verbose level: 1=error, 2=warning, 3=message, 4+=debugging
VERBOSE_LEVELS = {1: logging.ERROR, 2: logging.WARNING, 3: logging.INFO}


def setup_logging(verbose=3):
    logging.basicConfig(
        stream=sys.stderr,
        level=VERBOSE_LEVELS.get(verbose, logging.DEBUG),
        format='[%(asctime)s] %(message)s',
        force=True,
    )


# function that checks if a file exists ----------------------------------------
def check_file_exists(file_name, isfasta=False):
    try:
        with open(file_name, "rb") as _in:
            # if fasta file, then check that it starts with ">" (an empty file has no records)
            if isfasta and not file_name.endswith(".gz"):
                if _in.read(1) not in (b">", b""):
                    print_error()
                    sys.stderr.write(f"Not a fasta file: {file_name}\n")
                    sys.stderr.write("          Fasta file is expected to start with '>'\n")
                    sys.exit(1)
    except OSError as e:
        print_error()
        sys.stderr.write(f"Cannot open file: {file_name}\n")
        sys.stderr.write(f"{e}\n")
        sys.exit(1)


# function that checks if a file exists already, and give an error -------------
def check_file_doesnt_exists(file_name):
    if os.path.exists(file_name):
        print_error()
        sys.stderr.write("Output file exists already: "+file_name+"\n")
        sys.exit(1)
