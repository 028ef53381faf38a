"""
Static name tables used to resolve provider labels to stored dimension names.

The tables are read-only; lookups are exact-key.
"""

from types import MappingProxyType

HANDEDNESS_LABELS = MappingProxyType({
    0: 'Left',
    1: 'Right',
})

TEAM_NAME_MAPPING = MappingProxyType({
    'NY Giants': 'New York Giants',
    'NY Jets': 'New York Jets',
    'LA Rams': 'Los Angeles Rams',
    'LA Chargers': 'Los Angeles Chargers',
    'KC Chiefs': 'Kansas City Chiefs',
    'TB Buccaneers': 'Tampa Bay Buccaneers',
    'NE Patriots': 'New England Patriots',
    'GB Packers': 'Green Bay Packers',
    'SF 49ers': 'San Francisco 49ers',
    'NO Saints': 'New Orleans Saints',
    'JAX Jaguars': 'Jacksonville Jaguars',
    'LV Raiders': 'Las Vegas Raiders',
})

# Provider college label -> college_name, tried after the raw label misses
COLLEGE_NAME_MAPPING = MappingProxyType({
    # SEC
    'Mississippi St.': 'Mississippi State',
    'Ole Miss': 'Mississippi',
    'Texas A&M': 'Texas A&M',
    'Texas AM': 'Texas A&M',

    # Abbreviations
    'Miami (FL)': 'Miami',
    'Valdosta St.': 'Valdosta State',
    'Mid Tenn St.': 'Middle Tennessee',
    'Alabama St.': 'Alabama State',
    'Alcorn St.': 'Alcorn State',
    'Appalach. St.': 'Appalachian State',
    'Arizona St.': 'Arizona State',
    'Arkansas St.': 'Arkansas State',
    'Arkansas P.B.': 'Arkansas–Pine Bluff',
    'Bowling Green St.': 'Bowling Green',
    'California-Davis': 'UC Davis',
    'Campbell Univ.': 'Campbell',
    'Colorado St.': 'Colorado State',
    'CSU-Pueblo': 'CSU Pueblo',
    'Connecticut': 'UConn',
    'East Central Univ.': 'East Central',
    'E. Illinois': 'Eastern Illinois',
    'E. Kentucky': 'Eastern Kentucky',
    'Eastern Wash.': 'Eastern Washington',
    'Elon University': 'Elon',
    'Florida AM': 'Florida A&M',
    'Ga. Southern': 'Georgia Southern',
    'Grambling St.': 'Grambling State',
    'Grand Valley St.': 'Grand Valley State',
    'Greenville College': 'Greenville',
    'Hawaii': 'Hawaiʻi',
    'Houston Baptist': 'Houston Christian',
    'Humboldt St.': 'Cal Poly Humboldt',
    'Humboldt State': 'Cal Poly Humboldt',
    'Illinois St.': 'Illinois State',
    'IUP': 'Indiana (PA)',
    'Jackson St.': 'Jackson State',
    'J. Madison': 'James Madison',
    'LA Tech': 'Louisiana Tech',
    'LA. Tech': 'Louisiana Tech',
    'Lenoir-Rhyne University': 'Lenoir-Rhyne',
    'Malone University': 'Malone',
    'Massachusetts': 'UMass',
    'Miami Univ.': 'Miami (OH)',
    'Miami (OH)': 'Miami (Ohio)',
    'Michigan St.': 'Michigan State',
    'Minnesota State': 'Minnesota State-Mankato',
    'Missouri W State': 'Missouri Western',
    'Missouri University of Science and Technology': 'Missouri S&T',
    'Missouri University of Science & Technology': 'Missouri S&T',
    'None': 'No College',
    'N.C. AT': 'North Carolina A&T',
    'NC Central': 'North Carolina Central',
    'NC State': 'North Carolina State',
    'N.C. State': 'NC State',
    'North Dakota St.': 'North Dakota State',
    'N. Arizona': 'Northern Arizona',
    'N. Colorado': 'Northern Colorado',
    'N. Illinois': 'Northern Illinois',
    'Oklahoma St.': 'Oklahoma State',
    'Pittsburg St.': 'Pittsburg State',
    'P. View AM': 'Prairie View A&M',
    'Saginaw Valley': 'Saginaw Valley State',
    "St. John's": "Saint John's",
    'San Diego St.': 'San Diego State',
    'San Jose St.': 'San Jose State',
    'Shepherd Univ.': 'Shepherd',
    'S. Dakota St.': 'South Dakota State',
    'S.C. State': 'South Carolina State',
    'SE Missouri St.': 'Southeast Missouri State',
    'S. Illinois': 'Southern Illinois',
    'Tenn-Chat': 'Chattanooga',
    'Tenn-Martin': 'UT Martin',
    'Texas AM-Commerce': 'Texas A&M-Commerce',
    'Tusculum College': 'Tusculum',
    'UL Monroe': 'Louisiana-Monroe',
    'UL Lafayette': 'Louisiana',
    'UTSA': 'Texas-San Antonio',
    'UAB': 'Alabama-Birmingham',
    'UBC': 'British Columbia',
    'UCF': 'Central Florida',
    'USC': 'Southern California',
    'USF': 'South Florida',
    'UCLA': 'California-Los Angeles',
    'University of Charleston': 'Charleston',
    'UNLV': 'Nevada-Las Vegas',
    'Wagner College': 'Wagner',
    'Wash. St.': 'Washington State',
    'W. Illinois': 'Western Illinois',
    'W. Kentucky': 'Western Kentucky',
    'W. Michigan': 'Western Michigan',
    'William  Mary': 'William & Mary',
    'Wisc-Whitewater': 'Wisconsin-Whitewater',
    'Youngstown St.': 'Youngstown State',
    'SMU': 'Southern Methodist',
    'TCU': 'Texas Christian',
    'LSU': 'Louisiana State',
    'FIU': 'Florida International',
    'FAU': 'Florida Atlantic',
    'BYU': 'Brigham Young',
    'Cal': 'California',
    'UConn': 'Connecticut',
    'UMass': 'Massachusetts',
    'UTEP': 'Texas-El Paso',
})

# "First Last" -> college_name, for players the provider lists under the wrong school
PLAYER_COLLEGE_OVERRIDES = MappingProxyType({
    'Grover Stewart': 'Albany State',
    'Jalyx Hunt': 'Cornell',
    'Dondrea Tillman': 'Indiana (PA)',
    'Kameron Johnson': 'Barton',
})
