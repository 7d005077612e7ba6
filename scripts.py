from subprocess import CalledProcessError, run
import sys


def test(args):
    try:
        run(["flake8"], check=True)
        run(
            ["pytest", "--cov=ripple", "--cov-report=term-missing"] + args,
            check=True,
        )
    except CalledProcessError:
        sys.exit(1)


def main():
    cmd, *args = sys.argv[1:] or [None]
    if cmd == "test":
        test(args)
    else:
        sys.exit(1)


if __name__ == "__main__":
    main()
