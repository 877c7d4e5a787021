import io

import tidyground as tg

TABLE4A = """\
country,1999,2000
Afghanistan,745,2666
Brazil,37737,80488
China,212258,213766
"""

wide = tg.read_delimited(io.StringIO(TABLE4A))
print(wide)
print("---")

longer = wide.pivot_longer(["1999", "2000"], names_to="year", values_to="cases", names_transform=int)
print(longer)
print("---")

print(longer.pivot_wider("year", "cases"))
