"""
FBS team reference table: display names, URL slugs, conferences, ESPN ids.

The short id is the bare school name as it appears in third-party feeds
(transfer-portal rows, ESPN location names).
"""

from cfbhq import config

# (short id, display name, slug, conference, ESPN team id)
_TEAM_ROWS = [
    # SEC
    ("alabama", "Alabama Crimson Tide", "alabama-crimson-tide", "SEC", "333"),
    ("arkansas", "Arkansas Razorbacks", "arkansas-razorbacks", "SEC", "8"),
    ("auburn", "Auburn Tigers", "auburn-tigers", "SEC", "2"),
    ("florida", "Florida Gators", "florida-gators", "SEC", "57"),
    ("georgia", "Georgia Bulldogs", "georgia-bulldogs", "SEC", "61"),
    ("kentucky", "Kentucky Wildcats", "kentucky-wildcats", "SEC", "96"),
    ("lsu", "LSU Tigers", "lsu-tigers", "SEC", "99"),
    ("ole miss", "Ole Miss Rebels", "ole-miss-rebels", "SEC", "145"),
    ("mississippi state", "Mississippi State Bulldogs", "mississippi-state-bulldogs", "SEC", "344"),
    ("missouri", "Missouri Tigers", "missouri-tigers", "SEC", "142"),
    ("oklahoma", "Oklahoma Sooners", "oklahoma-sooners", "SEC", "201"),
    ("south carolina", "South Carolina Gamecocks", "south-carolina-gamecocks", "SEC", "2579"),
    ("tennessee", "Tennessee Volunteers", "tennessee-volunteers", "SEC", "2633"),
    ("texas", "Texas Longhorns", "texas-longhorns", "SEC", "251"),
    ("texas a&m", "Texas A&M Aggies", "texas-am-aggies", "SEC", "245"),
    ("vanderbilt", "Vanderbilt Commodores", "vanderbilt-commodores", "SEC", "238"),

    # Big Ten
    ("illinois", "Illinois Fighting Illini", "illinois-fighting-illini", "Big Ten", "356"),
    ("indiana", "Indiana Hoosiers", "indiana-hoosiers", "Big Ten", "84"),
    ("iowa", "Iowa Hawkeyes", "iowa-hawkeyes", "Big Ten", "2294"),
    ("maryland", "Maryland Terrapins", "maryland-terrapins", "Big Ten", "120"),
    ("michigan", "Michigan Wolverines", "michigan-wolverines", "Big Ten", "130"),
    ("michigan state", "Michigan State Spartans", "michigan-state-spartans", "Big Ten", "127"),
    ("minnesota", "Minnesota Golden Gophers", "minnesota-golden-gophers", "Big Ten", "135"),
    ("nebraska", "Nebraska Cornhuskers", "nebraska-cornhuskers", "Big Ten", "158"),
    ("northwestern", "Northwestern Wildcats", "northwestern-wildcats", "Big Ten", "77"),
    ("ohio state", "Ohio State Buckeyes", "ohio-state-buckeyes", "Big Ten", "194"),
    ("oregon", "Oregon Ducks", "oregon-ducks", "Big Ten", "2483"),
    ("penn state", "Penn State Nittany Lions", "penn-state-nittany-lions", "Big Ten", "213"),
    ("purdue", "Purdue Boilermakers", "purdue-boilermakers", "Big Ten", "2509"),
    ("rutgers", "Rutgers Scarlet Knights", "rutgers-scarlet-knights", "Big Ten", "164"),
    ("ucla", "UCLA Bruins", "ucla-bruins", "Big Ten", "26"),
    ("usc", "USC Trojans", "usc-trojans", "Big Ten", "30"),
    ("washington", "Washington Huskies", "washington-huskies", "Big Ten", "264"),
    ("wisconsin", "Wisconsin Badgers", "wisconsin-badgers", "Big Ten", "275"),

    # Big 12
    ("arizona", "Arizona Wildcats", "arizona-wildcats", "Big 12", "12"),
    ("arizona state", "Arizona State Sun Devils", "arizona-state-sun-devils", "Big 12", "9"),
    ("baylor", "Baylor Bears", "baylor-bears", "Big 12", "239"),
    ("byu", "BYU Cougars", "byu-cougars", "Big 12", "252"),
    ("cincinnati", "Cincinnati Bearcats", "cincinnati-bearcats", "Big 12", "2132"),
    ("colorado", "Colorado Buffaloes", "colorado-buffaloes", "Big 12", "38"),
    ("houston", "Houston Cougars", "houston-cougars", "Big 12", "248"),
    ("iowa state", "Iowa State Cyclones", "iowa-state-cyclones", "Big 12", "66"),
    ("kansas", "Kansas Jayhawks", "kansas-jayhawks", "Big 12", "2305"),
    ("kansas state", "Kansas State Wildcats", "kansas-state-wildcats", "Big 12", "2306"),
    ("oklahoma state", "Oklahoma State Cowboys", "oklahoma-state-cowboys", "Big 12", "197"),
    ("tcu", "TCU Horned Frogs", "tcu-horned-frogs", "Big 12", "2628"),
    ("texas tech", "Texas Tech Red Raiders", "texas-tech-red-raiders", "Big 12", "2641"),
    ("ucf", "UCF Knights", "ucf-knights", "Big 12", "2116"),
    ("utah", "Utah Utes", "utah-utes", "Big 12", "254"),
    ("west virginia", "West Virginia Mountaineers", "west-virginia-mountaineers", "Big 12", "277"),

    # ACC
    ("boston college", "Boston College Eagles", "boston-college-eagles", "ACC", "103"),
    ("california", "California Golden Bears", "california-golden-bears", "ACC", "25"),
    ("clemson", "Clemson Tigers", "clemson-tigers", "ACC", "228"),
    ("duke", "Duke Blue Devils", "duke-blue-devils", "ACC", "150"),
    ("florida state", "Florida State Seminoles", "florida-state-seminoles", "ACC", "52"),
    ("georgia tech", "Georgia Tech Yellow Jackets", "georgia-tech-yellow-jackets", "ACC", "59"),
    ("louisville", "Louisville Cardinals", "louisville-cardinals", "ACC", "97"),
    ("miami", "Miami Hurricanes", "miami-hurricanes", "ACC", "2390"),
    ("north carolina state", "NC State Wolfpack", "nc-state-wolfpack", "ACC", "152"),
    ("north carolina", "North Carolina Tar Heels", "north-carolina-tar-heels", "ACC", "153"),
    ("pittsburgh", "Pittsburgh Panthers", "pittsburgh-panthers", "ACC", "221"),
    ("smu", "SMU Mustangs", "smu-mustangs", "ACC", "2567"),
    ("stanford", "Stanford Cardinal", "stanford-cardinal", "ACC", "24"),
    ("syracuse", "Syracuse Orange", "syracuse-orange", "ACC", "183"),
    ("virginia", "Virginia Cavaliers", "virginia-cavaliers", "ACC", "258"),
    ("virginia tech", "Virginia Tech Hokies", "virginia-tech-hokies", "ACC", "259"),
    ("wake forest", "Wake Forest Demon Deacons", "wake-forest-demon-deacons", "ACC", "154"),

    # Pac-12
    ("oregon state", "Oregon State Beavers", "oregon-state-beavers", "Pac-12", "204"),
    ("washington state", "Washington State Cougars", "washington-state-cougars", "Pac-12", "265"),

    # Independent
    ("notre dame", "Notre Dame Fighting Irish", "notre-dame-fighting-irish", "Independent", "87"),
    ("connecticut", "UConn Huskies", "uconn-huskies", "Independent", "41"),

    # American
    ("army", "Army Black Knights", "army-black-knights", "American", "349"),
    ("charlotte", "Charlotte 49ers", "charlotte-49ers", "American", "2429"),
    ("east carolina", "East Carolina Pirates", "east-carolina-pirates", "American", "151"),
    ("fau", "FAU Owls", "fau-owls", "American", "2226"),
    ("memphis", "Memphis Tigers", "memphis-tigers", "American", "235"),
    ("navy", "Navy Midshipmen", "navy-midshipmen", "American", "2426"),
    ("north texas", "North Texas Mean Green", "north-texas-mean-green", "American", "249"),
    ("rice", "Rice Owls", "rice-owls", "American", "242"),
    ("usf", "South Florida Bulls", "south-florida-bulls", "American", "58"),
    ("temple", "Temple Owls", "temple-owls", "American", "218"),
    ("tulane", "Tulane Green Wave", "tulane-green-wave", "American", "2655"),
    ("tulsa", "Tulsa Golden Hurricane", "tulsa-golden-hurricane", "American", "202"),
    ("uab", "UAB Blazers", "uab-blazers", "American", "5"),
    ("utsa", "UTSA Roadrunners", "utsa-roadrunners", "American", "2636"),

    # Mountain West
    ("air force", "Air Force Falcons", "air-force-falcons", "Mountain West", "2005"),
    ("boise state", "Boise State Broncos", "boise-state-broncos", "Mountain West", "68"),
    ("colorado state", "Colorado State Rams", "colorado-state-rams", "Mountain West", "36"),
    ("fresno state", "Fresno State Bulldogs", "fresno-state-bulldogs", "Mountain West", "278"),
    ("hawaii", "Hawaii Rainbow Warriors", "hawaii-rainbow-warriors", "Mountain West", "62"),
    ("nevada", "Nevada Wolf Pack", "nevada-wolf-pack", "Mountain West", "2440"),
    ("new mexico", "New Mexico Lobos", "new-mexico-lobos", "Mountain West", "167"),
    ("san diego state", "San Diego State Aztecs", "san-diego-state-aztecs", "Mountain West", "21"),
    ("san jose state", "San Jose State Spartans", "san-jose-state-spartans", "Mountain West", "23"),
    ("unlv", "UNLV Rebels", "unlv-rebels", "Mountain West", "2439"),
    ("utah state", "Utah State Aggies", "utah-state-aggies", "Mountain West", "328"),
    ("wyoming", "Wyoming Cowboys", "wyoming-cowboys", "Mountain West", "2751"),

    # Sun Belt
    ("appalachian state", "Appalachian State Mountaineers", "appalachian-state-mountaineers", "Sun Belt", "2026"),
    ("arkansas state", "Arkansas State Red Wolves", "arkansas-state-red-wolves", "Sun Belt", "2032"),
    ("coastal carolina", "Coastal Carolina Chanticleers", "coastal-carolina-chanticleers", "Sun Belt", "324"),
    ("georgia southern", "Georgia Southern Eagles", "georgia-southern-eagles", "Sun Belt", "290"),
    ("georgia state", "Georgia State Panthers", "georgia-state-panthers", "Sun Belt", "2247"),
    ("james madison", "James Madison Dukes", "james-madison-dukes", "Sun Belt", "256"),
    ("louisiana", "Louisiana Ragin Cajuns", "louisiana-ragin-cajuns", "Sun Belt", "309"),
    ("marshall", "Marshall Thundering Herd", "marshall-thundering-herd", "Sun Belt", "276"),
    ("old dominion", "Old Dominion Monarchs", "old-dominion-monarchs", "Sun Belt", "295"),
    ("south alabama", "South Alabama Jaguars", "south-alabama-jaguars", "Sun Belt", "6"),
    ("southern miss", "Southern Miss Golden Eagles", "southern-miss-golden-eagles", "Sun Belt", "2572"),
    ("texas state", "Texas State Bobcats", "texas-state-bobcats", "Sun Belt", "326"),
    ("troy", "Troy Trojans", "troy-trojans", "Sun Belt", "2653"),
    ("louisiana-monroe", "Louisiana-Monroe Warhawks", "louisiana-monroe-warhawks", "Sun Belt", "2433"),

    # MAC
    ("akron", "Akron Zips", "akron-zips", "MAC", "2006"),
    ("ball state", "Ball State Cardinals", "ball-state-cardinals", "MAC", "2050"),
    ("bowling green", "Bowling Green Falcons", "bowling-green-falcons", "MAC", "189"),
    ("buffalo", "Buffalo Bulls", "buffalo-bulls", "MAC", "2084"),
    ("central michigan", "Central Michigan Chippewas", "central-michigan-chippewas", "MAC", "2117"),
    ("eastern michigan", "Eastern Michigan Eagles", "eastern-michigan-eagles", "MAC", "2199"),
    ("kent state", "Kent State Golden Flashes", "kent-state-golden-flashes", "MAC", "2309"),
    ("massachusetts", "UMass Minutemen", "umass-minutemen", "MAC", "113"),
    ("miami (oh)", "Miami (OH) RedHawks", "miami-oh-redhawks", "MAC", "193"),
    ("northern illinois", "Northern Illinois Huskies", "northern-illinois-huskies", "MAC", "2459"),
    ("ohio", "Ohio Bobcats", "ohio-bobcats", "MAC", "195"),
    ("toledo", "Toledo Rockets", "toledo-rockets", "MAC", "2649"),
    ("western michigan", "Western Michigan Broncos", "western-michigan-broncos", "MAC", "2711"),

    # Conference USA
    ("delaware", "Delaware Fightin Blue Hens", "delaware-fightin-blue-hens", "Conference USA", "48"),
    ("florida international", "FIU Panthers", "fiu-panthers", "Conference USA", "2229"),
    ("jacksonville state", "Jacksonville State Gamecocks", "jacksonville-state-gamecocks", "Conference USA", "55"),
    ("kennesaw state", "Kennesaw State Owls", "kennesaw-state-owls", "Conference USA", "338"),
    ("liberty", "Liberty Flames", "liberty-flames", "Conference USA", "2335"),
    ("louisiana tech", "Louisiana Tech Bulldogs", "louisiana-tech-bulldogs", "Conference USA", "2348"),
    ("middle tennessee state", "Middle Tennessee Blue Raiders", "middle-tennessee-blue-raiders", "Conference USA", "2393"),
    ("new mexico state", "New Mexico State Aggies", "new-mexico-state-aggies", "Conference USA", "166"),
    ("sam houston", "Sam Houston Bearkats", "sam-houston-bearkats", "Conference USA", "2534"),
    ("utep", "UTEP Miners", "utep-miners", "Conference USA", "2638"),
    ("western kentucky", "Western Kentucky Hilltoppers", "western-kentucky-hilltoppers", "Conference USA", "98"),
]

ALL_TEAMS = [
    {
        "id": short_id,
        "name": name,
        "slug": slug,
        "conference": conference,
        "espnId": espn_id,
        "logo": config.ESPN_LOGO_URL.format(espn_id=espn_id),
    }
    for short_id, name, slug, conference, espn_id in _TEAM_ROWS
]

_TEAMS_BY_SLUG = {t["slug"]: t for t in ALL_TEAMS}
_TEAMS_BY_ESPN_ID = {t["espnId"]: t for t in ALL_TEAMS}

# Other spellings seen in feeds → short id
_ALIASES = {
    "app state": "appalachian state",
    "florida atlantic": "fau",
    "fiu": "florida international",
    "ul monroe": "louisiana-monroe",
    "ulm": "louisiana-monroe",
    "louisiana monroe": "louisiana-monroe",
    "middle tennessee": "middle tennessee state",
    "nc state": "north carolina state",
    "south florida": "usf",
    "uconn": "connecticut",
    "umass": "massachusetts",
    "hawai'i": "hawaii",
}

_TEAMS_BY_KEY = {}
for _t in ALL_TEAMS:
    _TEAMS_BY_KEY[_t["id"]] = _t
    _TEAMS_BY_KEY[_t["name"].lower()] = _t
for _alias, _short_id in _ALIASES.items():
    _TEAMS_BY_KEY[_alias] = _TEAMS_BY_KEY[_short_id]


def _normalize(name):
    return " ".join((name or "").lower().split())


def get_team_by_slug(slug):
    return _TEAMS_BY_SLUG.get((slug or "").lower())


def get_team_by_espn_id(espn_id):
    return _TEAMS_BY_ESPN_ID.get(str(espn_id))


def get_team_by_name(name):
    """Resolve a school or display name ('Ohio State', 'Ohio State Buckeyes').

    Exact match on short id or full name first, then a full name that starts
    with the given name followed by the mascot.
    """
    key = _normalize(name)
    if not key:
        return None
    team = _TEAMS_BY_KEY.get(key)
    if team:
        return team
    for t in ALL_TEAMS:
        if t["name"].lower().startswith(key + " "):
            return t
    return None


def schools_match(school, team):
    """True when a free-text school name refers to ``team``.

    'Ohio State' matches Ohio State but not Ohio; 'Miami' matches Miami
    (the ACC school) but not Miami (OH).
    """
    key = _normalize(school)
    if not key:
        return False
    exact = _TEAMS_BY_KEY.get(key)
    if exact is not None:
        return exact is team
    return team["name"].lower().startswith(key + " ") and get_team_by_name(key) is team


def teams_in_conference(conference):
    conf = (conference or "").lower()
    return [t for t in ALL_TEAMS if t["conference"].lower() == conf]


def all_conferences():
    return sorted({t["conference"] for t in ALL_TEAMS})
