# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import json
import unittest

from resumectl import extractors
from resumectl.extractors import (
    EntityKind,
    ExtractedExperience,
    ExtractedLanguage,
    ExtractedProfile,
    classify_entity,
)


def _page(head="", body=""):
    return f"<html><head>{head}</head><body>{body}</body></html>"


def _ld(data):
    return f'<script type="application/ld+json">{json.dumps(data)}</script>'


API_PAYLOAD = {
    "data": {"elements": [{
        "$type": "com.linkedin.voyager.dash.identity.profile.Profile",
        "firstName": "Ada",
        "lastName": "Lovelace",
        "headline": "Analyst",
        "geoLocation": {"geoLocationName": "London"},
    }]},
    "included": [
        {
            "$type": "com.linkedin.voyager.dash.identity.profile.Position",
            "title": "Programmer",
            "companyName": {"text": "Analytical Engine"},
            "dateRange": {"start": {"year": 1842, "month": 7}},
            "timePeriod": {"startDate": {"year": 1800}, "endDate": {"year": 1843}},
        },
        {
            "$type": "com.linkedin.voyager.dash.identity.profile.Position",
            "title": "Writer",
            "company": {"name": "Taylor's Scientific Memoirs"},
        },
        {
            "$type": "com.linkedin.voyager.dash.identity.profile.Education",
            "schoolName": "Home schooling",
            "degreeName": "Mathematics",
            "fieldOfStudy": "Analysis",
        },
        {"$type": "com.linkedin.voyager.dash.skill.Skill", "name": "Mathematics"},
        {"$type": "com.linkedin.voyager.dash.skill.Skill", "name": "Mathematics"},
        {"$type": "com.linkedin.voyager.dash.language.Language", "name": "French",
         "proficiency": "PROFESSIONAL_WORKING"},
        {"$type": "com.linkedin.voyager.dash.certification.Certification", "name": "Notes",
         "authority": "Royal Society", "dateRange": {"start": {"year": 1843}}},
        {"$type": "com.linkedin.voyager.common.Geo", "name": "ignored"},
        "not-a-dict",
    ],
}


class TestClassifyEntity(unittest.TestCase):
    def test_kinds(self):
        cases = [
            ({"$type": "com.linkedin.voyager.dash.identity.profile.Profile"}, EntityKind.PROFILE),
            ({"$type": "com.linkedin.voyager.dash.identity.profile.Position"}, EntityKind.POSITION),
            ({"$type": "x.PositionGroup"}, EntityKind.POSITION),
            ({"entityUrn": "urn:li:fs_position:(ACoAA,1)"}, EntityKind.POSITION),
            ({"$type": "com.linkedin.voyager.dash.identity.profile.Education"}, EntityKind.EDUCATION),
            ({"entityUrn": "urn:li:fsd_profileEducation:(ACoAA,2)"}, EntityKind.EDUCATION),
            ({"$type": "x.Skill"}, EntityKind.SKILL),
            ({"entityUrn": "urn:li:fs_language:1"}, EntityKind.LANGUAGE),
            ({"$type": "x.Certification"}, EntityKind.CERTIFICATION),
            ({"$type": "com.linkedin.common.Company"}, EntityKind.UNKNOWN),
            ({}, EntityKind.UNKNOWN),
        ]
        for entity, kind in cases:
            self.assertIs(classify_entity(entity), kind, entity)

    def test_profile_position_is_a_position(self):
        entity = {"$type": "com.linkedin.voyager.identity.profile.ProfilePosition"}
        self.assertIs(classify_entity(entity), EntityKind.POSITION)


class TestApiPayload(unittest.TestCase):
    def setUp(self):
        self.profile = extractors.extract_from_api_payload(API_PAYLOAD)

    def test_profile_fields(self):
        self.assertEqual(self.profile.first_name, "Ada")
        self.assertEqual(self.profile.last_name, "Lovelace")
        self.assertEqual(self.profile.headline, "Analyst")
        self.assertEqual(self.profile.location, "London")

    def test_positions(self):
        self.assertEqual(len(self.profile.experience), 2)
        first, second = self.profile.experience
        self.assertEqual(first.company, "Analytical Engine")
        self.assertEqual(first.start_date, "07/1842")
        # dateRange wins for the start, timePeriod fills the missing end
        self.assertEqual(first.end_date, "1843")
        self.assertEqual(second.company, "Taylor's Scientific Memoirs")

    def test_other_lists(self):
        self.assertEqual(self.profile.education[0].school, "Home schooling")
        self.assertEqual(self.profile.education[0].field_of_study, "Analysis")
        self.assertEqual(self.profile.skills, ["Mathematics"])
        self.assertEqual(self.profile.languages, [ExtractedLanguage("French", "PROFESSIONAL_WORKING")])
        cert = self.profile.certifications[0]
        self.assertEqual((cert.name, cert.organization, cert.issue_date), ("Notes", "Royal Society", "1843"))

    def test_non_mapping_payload(self):
        self.assertEqual(extractors.extract_from_api_payload(["nope"]), ExtractedProfile())


class TestEmbeddedPayloads(unittest.TestCase):
    def test_code_comment_payload(self):
        data = json.dumps({"included": API_PAYLOAD["included"]}).replace('"', "&quot;")
        html = _page(body=f'<code id="bpr-guid-123"><!--{data}--></code><code id="other"><!--{{}}--></code>')
        profile = extractors.extract_from_embedded_payloads(html)
        self.assertEqual(len(profile.experience), 2)
        self.assertEqual(profile.skills, ["Mathematics"])

    def test_inline_included_array(self):
        items = json.dumps([{"$type": "x.Skill", "name": "Go"}])[1:-1]
        html = _page(body=f'<script>var x = {{"included": [{items}],"meta": {{}}}}</script>')
        profile = extractors.extract_from_embedded_payloads(html)
        self.assertEqual(profile.skills, ["Go"])


class TestJsonLd(unittest.TestCase):
    PERSON = {
        "@context": "http://schema.org",
        "@graph": [
            {"@type": "WebPage", "name": "Not a person"},
            {
                "@type": "Person",
                "name": "Grace Brewster Hopper",
                "description": "Line one<br>Line two",
                "address": {"addressLocality": "Arlington"},
                "jobTitle": ["*****", "Rear Admiral"],
                "worksFor": [
                    {"name": "US Navy", "location": "Arlington",
                     "member": {"startDate": 1943, "endDate": {"year": 1986, "month": 8}}},
                    {"name": "US Navy", "location": "Arlington",
                     "member": {"startDate": 1943, "endDate": {"year": 1986, "month": 8}}},
                    {"name": "Masked ***"},
                ],
                "alumniOf": [
                    {"name": "Yale", "member": {"description": "PhD", "startDate": 1930, "endDate": 1934}},
                ],
                "knowsLanguage": [{"name": "English"}, {"name": "English"}],
                "knowsAbout": ["COBOL", "COBOL", "Compilers"],
            },
        ],
    }

    def test_person(self):
        profile = extractors.extract_from_json_ld(_page(head=_ld(self.PERSON)))
        self.assertEqual(profile.first_name, "Grace")
        self.assertEqual(profile.last_name, "Brewster Hopper")
        self.assertEqual(profile.summary, "Line one\nLine two")
        self.assertEqual(profile.location, "Arlington")
        self.assertEqual(profile.headline, "Rear Admiral")

    def test_works_for_dedup_and_masking(self):
        profile = extractors.extract_from_json_ld(_page(head=_ld(self.PERSON)))
        self.assertEqual(len(profile.experience), 1)
        exp = profile.experience[0]
        self.assertEqual((exp.company, exp.start_date, exp.end_date), ("US Navy", "1943", "08/1986"))

    def test_lists(self):
        profile = extractors.extract_from_json_ld(_page(head=_ld(self.PERSON)))
        self.assertEqual(profile.education[0].school, "Yale")
        self.assertEqual(profile.education[0].degree, "PhD")
        self.assertEqual([lang.name for lang in profile.languages], ["English"])
        self.assertEqual(profile.skills, ["COBOL", "Compilers"])

    def test_masked_job_titles_only(self):
        data = {"@type": "Person", "name": "A B", "jobTitle": ["***", "Masked ****"]}
        profile = extractors.extract_from_json_ld(_page(head=_ld(data)))
        self.assertEqual(profile.headline, "")

    def test_invalid_block_is_skipped(self):
        html = _page(head='<script type="application/ld+json">{oops</script>'
                          + _ld({"@type": "Person", "name": "Solo"}))
        profile = extractors.extract_from_json_ld(html)
        self.assertEqual(profile.first_name, "Solo")
        self.assertEqual(profile.last_name, "")

    def test_deterministic(self):
        html = _page(head=_ld(self.PERSON))
        self.assertEqual(extractors.extract_from_json_ld(html), extractors.extract_from_json_ld(html))


class TestMetaAndVisible(unittest.TestCase):
    def test_meta_tags(self):
        head = ('<meta property="og:title" content="John Doe - Engineer at Acme | LinkedIn">'
                '<meta property="og:description" content="Builds R&amp;amp;D tools">'
                '<meta name="geo.placename" content="Paris">')
        profile = extractors.extract_from_meta_tags(_page(head=head))
        self.assertEqual((profile.first_name, profile.last_name), ("John", "Doe"))
        self.assertEqual(profile.headline, "Engineer at Acme")
        self.assertEqual(profile.summary, "Builds R&D tools")
        self.assertEqual(profile.location, "Paris")

    def test_meta_title_without_separator(self):
        head = '<meta property="og:title" content="LinkedIn">'
        profile = extractors.extract_from_meta_tags(_page(head=head))
        self.assertFalse(profile.has_name)

    def test_visible_location_skips_email(self):
        body = ('<div class="top-card-subline-item">jane@example.com</div>'
                '<div class="profile-info-subheader extra">  Lyon, France </div>')
        profile = extractors.extract_from_visible_content(_page(body=body))
        self.assertEqual(profile.location, "Lyon, France")

    def test_visible_location_first_prefix(self):
        body = '<span class="top-card-subline-item--bullet">Berlin</span>'
        profile = extractors.extract_from_visible_content(_page(body=body))
        self.assertEqual(profile.location, "Berlin")


class TestScriptData(unittest.TestCase):
    def test_scan(self):
        script = ('{"firstName":"Jane","lastName":"Roe","headline":"SRE",'
                  '"geoLocationName":"Oslo",'
                  '"summary":"I keep systems running \\u2013 mostly",'
                  '"companyName":"Acme","title":"SRE"},'
                  '{"companyName":"Acme","title":"SRE"},'
                  '{"schoolName":"NTNU"},{"skillName":"Linux"},{"skillName":"Linux"}')
        profile = extractors.extract_from_script_data(_page(body=f"<script>{script}</script>"))
        self.assertEqual((profile.first_name, profile.last_name), ("Jane", "Roe"))
        self.assertEqual(profile.headline, "SRE")
        self.assertEqual(profile.location, "Oslo")
        self.assertEqual(profile.summary, "I keep systems running – mostly")
        self.assertEqual(profile.experience, [ExtractedExperience(title="SRE", company="Acme")])
        self.assertEqual(profile.education[0].school, "NTNU")
        self.assertEqual(profile.skills, ["Linux"])

    def test_title_before_company(self):
        html = '<script>{"title":"CTO","companyName":"Initech"}</script>'
        profile = extractors.extract_from_script_data(html)
        self.assertEqual(profile.experience, [ExtractedExperience(title="CTO", company="Initech")])

    def test_short_summary_ignored(self):
        profile = extractors.extract_from_script_data('{"summary":"too short"}')
        self.assertEqual(profile.summary, "")


class TestMergeAndResume(unittest.TestCase):
    def test_first_writer_wins(self):
        first = ExtractedProfile(first_name="Ada", skills=["Math"])
        second = ExtractedProfile(first_name="Grace", last_name="Hopper", skills=["COBOL"],
                                  headline="Admiral")
        first.merge(second)
        self.assertEqual(first.first_name, "Ada")
        self.assertEqual(first.last_name, "Hopper")
        self.assertEqual(first.headline, "Admiral")
        self.assertEqual(first.skills, ["Math"])

    def test_merge_copies_lists(self):
        target = ExtractedProfile()
        source = ExtractedProfile(skills=["Go"])
        target.merge(source)
        target.skills.append("Rust")
        self.assertEqual(source.skills, ["Go"])

    def test_extract_from_html_priority(self):
        head = ('<meta property="og:title" content="Meta Name - Meta Headline | LinkedIn">'
                + _ld({"@type": "Person", "name": "Ld Person", "jobTitle": "Ld Headline"}))
        profile = extractors.extract_from_html(_page(head=head))
        self.assertEqual(profile.first_name, "Ld")
        self.assertEqual(profile.headline, "Ld Headline")

    def test_embedded_only_when_authenticated(self):
        data = json.dumps({"included": [{"$type": "x.Skill", "name": "Go"}]}).replace('"', "&quot;")
        html = _page(body=f'<code id="bpr-guid-1"><!--{data}--></code>')
        self.assertEqual(extractors.extract_from_html(html).skills, [])
        self.assertEqual(extractors.extract_from_html(html, authenticated=True).skills, ["Go"])

    def test_to_resume(self):
        profile = extractors.extract_from_api_payload(API_PAYLOAD)
        resume = profile.to_resume("https://www.linkedin.com/in/ada/")
        self.assertEqual(resume.personal.full_name, "Ada Lovelace")
        self.assertEqual(resume.personal.title, "Analyst")
        self.assertEqual(resume.personal.linkedin, "linkedin.com/in/ada")
        self.assertEqual(resume.personal.email, "your.email@example.com")
        self.assertEqual(resume.experience[0].position, "Programmer")
        self.assertEqual(resume.education[0].institution, "Home schooling")
        self.assertEqual(resume.skills[0].category, "Skills")
        self.assertEqual(resume.skills[0].items, ["Mathematics"])
        self.assertEqual(resume.languages[0].level, "Professional (B2)")
        self.assertEqual(resume.certifications[0].issuer, "Royal Society")
        self.assertEqual(resume.projects, [])


class TestJsonLdShapes(unittest.TestCase):
    def test_scalar_values_do_not_abort(self):
        data = {"@type": "Person", "name": "Ada Lovelace", "worksFor": 5, "alumniOf": True,
                "knowsLanguage": "English", "knowsAbout": "Python"}
        profile = extractors.extract_from_json_ld(_page(head=_ld(data)))
        self.assertEqual(profile.first_name, "Ada")
        self.assertEqual(profile.experience, [])
        self.assertEqual(profile.education, [])
        self.assertEqual(profile.skills, ["Python"])
        self.assertEqual([lang.name for lang in profile.languages], ["English"])

    def test_single_objects_and_things(self):
        data = {"@type": "Person", "name": "Ada",
                "worksFor": {"name": "Analytical Engine"},
                "knowsAbout": [{"@type": "Thing", "name": "Mathematics"}, "Poetry"]}
        profile = extractors.extract_from_json_ld(_page(head=_ld(data)))
        self.assertEqual([exp.company for exp in profile.experience], ["Analytical Engine"])
        self.assertEqual(profile.skills, ["Mathematics", "Poetry"])

    def test_masked_names_keep_other_fields(self):
        data = {
            "@type": "Person",
            "name": "Jane Roe",
            "worksFor": [{"name": "Secret ***", "location": "Oslo",
                          "member": {"description": "Ran *** things", "startDate": 2019, "endDate": 2021}}],
            "alumniOf": [{"name": "*** School",
                          "member": {"description": "BSc", "startDate": 2010, "endDate": 2014}}],
        }
        profile = extractors.extract_from_json_ld(_page(head=_ld(data)))

        exp = profile.experience[0]
        self.assertEqual(exp.company, "")
        self.assertEqual(exp.description, "")
        self.assertEqual((exp.location, exp.start_date, exp.end_date), ("Oslo", "2019", "2021"))
        edu = profile.education[0]
        self.assertEqual(edu.school, "")
        self.assertEqual((edu.degree, edu.start_date, edu.end_date), ("BSc", "2010", "2014"))


class TestPublicCascade(unittest.TestCase):
    STRAY_SCRIPT = ('<script>{"firstName":"Someone","lastName":"Else",'
                    '"title":"Recruiter","companyName":"OtherCorp","skillName":"Sales"}</script>')

    def test_inline_keys_ignored_without_session(self):
        profile = extractors.extract_from_html(_page(body=self.STRAY_SCRIPT))
        self.assertFalse(profile.has_name)
        self.assertEqual(profile.experience, [])
        self.assertEqual(profile.skills, [])

    def test_inline_keys_used_with_session(self):
        profile = extractors.extract_from_html(_page(body=self.STRAY_SCRIPT), authenticated=True)
        self.assertEqual(profile.first_name, "Someone")
        self.assertEqual(profile.experience, [ExtractedExperience(title="Recruiter", company="OtherCorp")])

    def test_deterministic(self):
        head = ('<meta property="og:title" content="Grace Hopper - Admiral | LinkedIn">'
                '<meta name="geo.placename" content="Arlington">'
                + _ld(TestJsonLd.PERSON))
        body = '<div class="top-card-subline-item">Arlington, VA</div>' + self.STRAY_SCRIPT
        html = _page(head=head, body=body)
        first = extractors.extract_from_html(html)
        self.assertEqual(first, extractors.extract_from_html(html))
        self.assertEqual(first.first_name, "Grace")


if __name__ == '__main__':
    unittest.main()
