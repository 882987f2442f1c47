"""Built-in list of pages ingested when no override is configured."""

DEFAULT_SOURCE_URLS: tuple[str, ...] = (
    "https://en.wikipedia.org/wiki/Formula_One",
    "https://f1.fandom.com/wiki/Formula_1_Wiki",
    "https://www.formula1.com/en/results/driver-standings",
    "https://www.formula1.com/en/racing/2025",
    "https://www.skysports.com/f1",
    "https://www.bbc.com/sport/formula1",
    "https://www.espn.com/f1/",
    "https://www.motorsport.com/f1/",
    "https://www.kaggle.com/datasets/rohanrao/formula-1-world-championship-1950-2020",
    "https://www.statista.com/topics/3899/motor-sports/",
    "https://www.statsf1.com/en/default.aspx",
    "https://www.formula1.com/en/timing/f1-live",
    "https://en.wikipedia.org/wiki/List_of_Formula_One_World_Drivers%27_Champions",
    "https://en.wikipedia.org/wiki/2024_Formula_One_World_Championship",
    "https://www.formula1.com/en/page/what-is-f1",
    "https://f1chronicle.com/a-beginners-guide-to-formula-1/",
    "https://www.cnet.com/culture/sports/f1-101-heres-everything-i-wish-i-knew-about-formula-1-when-i-started-watching/",
)
