from rich.pretty import pprint

from argtag import *


class Options:
    addr: str = Argument("short=a,long=addr,env=ADDR,default=0.0.0.0,help=address to connect to")
    verbose: bool = Argument("short,long,help=chatty output")
    token: str = Argument("env,help=api token")
    host: str = Argument("positional,help=host to connect to")
    port: uint16 = Argument("positional,default=8080")


if __name__ == '__main__':
    pprint(vars(parse(Options, shell=True)))
