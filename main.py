from rich import print
from rich.pretty import pprint

from fluentopt import *

__prog__ = "fluentopt-demo"

parser = (
    ParserBuilder()
    .build_argument("file")
        .set_description("file to work on")
        .build()
    .add_option("d", "debug", "print the grammar before parsing", long_key="debug")
    .build_option("o", "output")
        .set_long_key("output")
        .set_expects_value()
        .set_description("where to write the result")
        .build()
    .build_command("run")
        .set_description("run the file on a target")
        .build_parser()
            .add_argument("target", "host to run on")
            .add_option("n", "dry-run", "only show what would happen", long_key="dry-run")
            .build()
        .build()
    .build_and_get()
)


if __name__ == '__main__':
    model = invoke(parser, shell=True, fancy=True)
    if model.is_option_present("debug"):
        print(parser)
    pprint(model)
