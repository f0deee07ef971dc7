import random
import sys

NODES = [
    ("192.168.1.10", "0:1a:2b:3c:4d:5e"),
    ("192.168.1.11", "00:1A:2B:3C:4D:5F"),
    ("192.168.7.20", "a:b:c:d:e:f"),
    ("10.0.0.5", "de:ad:be:ef:0:1"),
    ("172.16.3.4", "de:ad:be:ef:0:2"),
    ("203.0.113.9", "02:42:ac:11:00:02"),
]


def main():
    path = sys.argv[1] if len(sys.argv) > 1 else "traf.txt"
    lines = int(sys.argv[2]) if len(sys.argv) > 2 else 500

    with open(path, "w", encoding="utf-8") as out:
        for _ in range(lines):
            (src_ip, src_mac), (dst_ip, dst_mac) = random.sample(NODES, 2)
            fields = [
                f"{src_ip}:{random.randint(1024, 65535)}",
                src_mac,
                f"{dst_ip}:{random.choice([53, 80, 443, 8080])}",
                dst_mac,
                random.choice(["true", "false"]),
                str(random.choice([64, 512, 1500, 9000, 65000])),
                f"{random.uniform(0.001, 2.0):.4f}",
            ]
            out.write(";".join(fields) + "\n")


if __name__ == "__main__":
    main()
