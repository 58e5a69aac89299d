import logging


LOG = logging.getLogger("meshfill")

_FORMAT = logging.Formatter("%(levelname)s %(name)s: %(message)s")


def add_logger_args(arg_parser):
    arg_parser.add_argument(
        "--debug",
        dest="debug",
        default=False,
        action="store_true",
        help="If set, per-hole debugging messages will be printed",
    )
    arg_parser.add_argument(
        "--quiet",
        "-q",
        dest="quiet",
        default=False,
        action="store_true",
        help="If set, only warnings (skipped holes, dangling borders) will be printed",
    )
    arg_parser.add_argument(
        "--log",
        dest="logfile",
        default=None,
        help="If set, the repair log will also be saved using the specified filename.",
    )


def configure_logging(args):
    if args.debug:
        LOG.setLevel(logging.DEBUG)
    elif args.quiet:
        LOG.setLevel(logging.WARNING)
    else:
        LOG.setLevel(logging.INFO)

    # Repeated calls (tests, notebooks) must not stack console handlers
    if not any(getattr(h, "_meshfill_console", False) for h in LOG.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(_FORMAT)
        console_handler._meshfill_console = True
        LOG.addHandler(console_handler)

    # Only the most recently requested log file stays attached
    for handler in list(LOG.handlers):
        if getattr(handler, "_meshfill_file", False):
            LOG.removeHandler(handler)
            handler.close()

    if args.logfile is not None:
        file_logger_handler = logging.FileHandler(args.logfile)
        file_logger_handler.setFormatter(_FORMAT)
        file_logger_handler._meshfill_file = True
        LOG.addHandler(file_logger_handler)
