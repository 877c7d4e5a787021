import sys

import tidyground as tg
from tidyground.compute import mean, n

flights = tg.read_delimited(sys.argv[1] if len(sys.argv) > 1 else "data/flights.csv")

delays = (
    flights.filter(tg.col("month").isin([11, 12]), tg.col("dep_delay").is_not_missing())
    .mutate(speed=tg.col("distance") / tg.col("air_time") * 60)
    .group_by("carrier")
    .summarize(flights=n(), delay=mean("dep_delay"), speed=mean("speed", skip_missing=True))
    .arrange(tg.desc("delay"))
)
print(delays)
