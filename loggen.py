import argparse
import datetime
import random


LICENSES = ["maya2024", "3dsmax2024", "autocad2024", "revit2024", "inventor2024"]
USERS = ["alice", "bob", "carol", "dave", "erin", "frank"]
MACHINES = ["workstation1", "workstation2", "ws-render01", "lab-pc07"]
DENIAL_NOTES = [
    "Licensed number of users already reached. (-4,342)",
    "User/host not on INCLUDE list for feature. (-39,147)",
]
NOISE = [
    "(adskflex) Server started on srv-lic01 for: 86999MAYA_F",
    "(lmgrd) lmgrd tcp-port 27000",
    "(adskflex) UNSUPPORTED: \"87048MAYA_T_F\" (PORT_AT_HOST_PLUS   ) alice@workstation1  (License server system does not support this feature. (-18,327))",
]


def _clock(ts: datetime.datetime) -> str:
    return f"{ts.hour:2d}:{ts.minute:02d}:{ts.second:02d}"


def _date(ts: datetime.datetime) -> str:
    return f"{ts.month}/{ts.day}/{ts.year}"


def generate_license_log(
    filename="license.log",
    target_lines=5000,
    start=datetime.datetime(2024, 3, 1, 9, 15, 0),
    seed=None,
):
    """
    Write a FlexNet-style debug log.

    Starts with a "FlexNet Licensing ... started" line, then writes
    IN/OUT/DENIED traffic with some noise. A TIMESTAMP line is written
    only once per day, a few hours after midnight, so the lines right
    after midnight exercise day rollover.
    """
    rng = random.Random(seed)
    current_time = start
    checked_out = []
    last_marker_day = start.date()

    with open(filename, "w") as f:
        f.write(
            f"{_clock(current_time)} (lmgrd) FlexNet Licensing (v11.16.2.0 build 242433 x64_n6) "
            f"started on srv-lic01 (linux) ({_date(current_time)})\n"
        )

        for _ in range(target_lines - 1):
            current_time += datetime.timedelta(seconds=rng.randint(2, 240))

            if current_time.date() != last_marker_day and current_time.hour >= 3:
                f.write(f"{_clock(current_time)} (adskflex) TIMESTAMP {_date(current_time)}\n")
                last_marker_day = current_time.date()
                continue

            roll = rng.random()
            # Noise refreshes the anchor time of day, keep it off the post-midnight stretch.
            if roll < 0.05 and current_time.date() == last_marker_day:
                f.write(f"{_clock(current_time)} {rng.choice(NOISE)}\n")
                continue

            if roll < 0.12:
                lic, user, host = rng.choice(LICENSES), rng.choice(USERS), rng.choice(MACHINES)
                f.write(
                    f'{_clock(current_time)} (adskflex) DENIED: "{lic}" {user}@{host}  '
                    f"({rng.choice(DENIAL_NOTES)})\n"
                )
                continue

            if checked_out and (roll > 0.6 or len(checked_out) > 20):
                lic, user, host = checked_out.pop(rng.randrange(len(checked_out)))
                f.write(f'{_clock(current_time)} (adskflex) IN: "{lic}" {user}@{host}\n')
            else:
                lic, user, host = rng.choice(LICENSES), rng.choice(USERS), rng.choice(MACHINES)
                checked_out.append((lic, user, host))
                f.write(f'{_clock(current_time)} (adskflex) OUT: "{lic}" {user}@{host}\n')


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Generate a sample FlexNet license log")
    parser.add_argument("--out", default="license.log")
    parser.add_argument("--lines", type=int, default=5000)
    parser.add_argument("--seed", type=int, default=None)
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    generate_license_log(args.out, args.lines, seed=args.seed)
    print(f"Generated {args.lines} lines in {args.out}")


if __name__ == "__main__":
    main()
