# config package — authoritative source for all pipeline configuration.
#
# Sub-modules:
#   pipeline_params.py  — identity columns, ID patterns, manual corrections,
#                         duplicate drop-list, missing-tolerance overrides
#   survey_config.py    — survey platform endpoint and request parameters
#
# Rubric tables live in data/rubrics/ as <measure>_scoring_rubric.csv.
