"""
GraphQL documents sent to the Livia content endpoint.
"""

SERVER_STATUS = """
query {
    server
    time
}
"""

PICTURE = """
query Picture($date: String) {
    picture(date: $date) {
        date
        title
        credit
        copyright
        media
        media_type
        explanation {
            original
            summarized
            kids
        }
    }
}
"""

EVENTS = """
query Events($daysInput: Int) {
    events(daysInput: $daysInput) {
        id
        title
        categories {
            id
            title
        }
        sources {
            id
            url
        }
        geometry {
            id
            magnitudeValue
            magnitudeUnit
            date
            type
            coordinates
        }
    }
}
"""

PLANETS = """
query {
    planets {
        id
        name
        description
        expandedDescription
        facts
        visual
        lastUpdated
        moons
        rings
        mass
        volume
        density
        temperature
        pressure
        radiusEquatorial
        radiusPolar
        radiusCore
        radiusHillsSphere
        volumetricMeanRadius
        angularDiameter
        momentOfInertia
        flattening
        gravityEquatorial
        gravityPolar
        escapeVelocity
        gravitationalParameter
        gravitationalParameterUncertainty
        rockyCoreMass
        orbitalInclination
        orbitalVelocity
        obliquityToOrbit
        siderealOrbitPeriodD
        siderealOrbitPeriodY
        siderealRotationRate
        siderealRotationPeriod
        solarDayLength
        albedo
        visualMagnitude
        visualMagnitudeOpposition
        rocheLimit
        solarConstant { perihelion aphelion mean }
        maxIR { perihelion aphelion mean }
        minIR { perihelion aphelion mean }
        atmosphere {
            name
            molar
            formula
            percentage
        }
    }
}
"""

ARTICLES = """
query {
    articles {
        month
        year
        title
        subtitle
        url
        source
        authors {
            name
            title
            image
        }
        banner {
            image
            designer
        }
    }
}
"""

# passphrase is substituted as a JSON string literal
API_KEY_TEMPLATE = "{{ apiKey(passphrase: {passphrase}) }}"
