"""
Closed category sets for the modelling features.

Each enum lists its levels in the order they become pandas categories, so
the model matrix always has the same dummy columns whatever subset of rows
a resample happens to contain.
"""

from enum import Enum
from typing import List


class Category(str, Enum):
    @classmethod
    def levels(cls) -> List[str]:
        return [member.value for member in cls]


class Citizenship(Category):
    UK = "UK"
    OTHER = "Other"


class Disability(Category):
    NOT_DISABLED = "Not disabled"
    DISABLED = "Disabled"


class Employment(Category):
    EMPLOYED = "Employed"
    UNEMPLOYED = "Unemployed"
    INACTIVE = "Inactive"
    RETIRED = "Retired"
    SICK_OR_DISABLED = "Sick or disabled"
    OTHER = "Other"


class Education(Category):
    DEGREE_OR_COLLEGE = "Degree or College"
    SECONDARY = "Secondary"
    TERTIARY = "Tertiary"
    NONE = "None"


class Gender(Category):
    FEMALE = "Female"
    MALE = "Male"


class MaritalStatus(Category):
    SINGLE = "Single"
    MARRIED = "Married"
    SEPARATED = "Separated"
    DIVORCED = "Divorced"
    WIDOWED = "Widowed"


class EmploymentLength(Category):
    NOT_IN_EMPLOYMENT = "Not in employment"
    UNDER_1_YEAR = "Less than 12 months"
    YEARS_1_TO_2 = "Between 1 and 2 years"
    YEARS_2_TO_5 = "Between 2 and 5 years"
    YEARS_5_TO_10 = "Between 5 and 10 years"
    YEARS_10_TO_20 = "Between 10 and 20 years"
    YEARS_20_PLUS = "20 years or more"


class YesNo(Category):
    NO = "No"
    YES = "Yes"


class CountBucket(Category):
    ZERO = "0"
    ONE = "1"
    TWO_PLUS = "2+"


class IncomeBand(Category):
    ZERO = "0"
    UNDER_500 = "1-499"
    UNDER_1000 = "500-999"
    UNDER_2000 = "1000-1999"
    UNDER_3000 = "2000-2999"
    FROM_3000 = "3000+"


class HousingTenure(Category):
    MORTGAGED = "Mortgaged"
    OUTRIGHT = "Outright"
    RENTED = "Rented"
    FREE = "Free"
    OTHER = "Other"


# Region levels are the letters A-Z.
REGION_LETTERS = [chr(code) for code in range(ord("A"), ord("Z") + 1)]
